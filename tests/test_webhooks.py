from storefront.domain.models import User

def _event(user_id="user_29w83sxmDNGwOuEthce5gg56FcC", emails=("new@example.com",), primary=None):
    addresses = [{"id": f"idn_{n}", "email_address": e} for n, e in enumerate(emails)]
    data = {"id": user_id, "email_addresses": addresses, "object": "user"}
    if primary is not None:
        data["primary_email_address_id"] = primary
    return {"type": "user.created", "object": "event", "data": data}

def test_user_created_event_provisions_user(client, db):
    resp = client.post('/webhooks/clerk', json=_event())
    assert resp.status_code == 201
    assert resp.json() == {"created": True}
    user = db.query(User).one()
    assert user.clerk_user_id == "user_29w83sxmDNGwOuEthce5gg56FcC"
    assert user.email == "new@example.com"
    assert user.created_at is not None

def test_primary_email_is_preferred(client, db):
    resp = client.post('/webhooks/clerk', json=_event(emails=("alt@example.com", "main@example.com"), primary="idn_1"))
    assert resp.status_code == 201
    assert db.query(User).one().email == "main@example.com"

def test_missing_identity_or_email_is_bad_request(client, db):
    for payload in ({}, {"data": {}}, _event(user_id=None), _event(emails=())):
        resp = client.post('/webhooks/clerk', json=payload)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing Clerk user id or email in webhook payload"}
    assert db.query(User).count() == 0

def test_malformed_body_is_bad_request(client, db):
    resp = client.post('/webhooks/clerk', content=b"not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert db.query(User).count() == 0

def test_replayed_event_does_not_duplicate_user(client, db):
    assert client.post('/webhooks/clerk', json=_event()).status_code == 201
    resp = client.post('/webhooks/clerk', json=_event())
    assert resp.status_code == 200
    assert resp.json() == {"created": False}
    assert db.query(User).count() == 1

def test_provisioned_user_can_place_orders(client, make_article, token_for):
    client.post('/webhooks/clerk', json=_event(user_id="user_fresh"))
    article = make_article()
    headers = {"Authorization": f"Bearer {token_for('user_fresh')}"}
    resp = client.post('/orders', json={"items": [{"articleId": article.id, "quantity": 1}]}, headers=headers)
    assert resp.status_code == 201
