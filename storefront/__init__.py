"""Storefront backend: article catalog, orders and payment sheets."""
