"""Delivery-zone resolution service for the pizzeria storefront."""
