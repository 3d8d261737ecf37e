"""
QR Inventory Service.

A FastAPI microservice exposing CRUD operations over a single inventory table
keyed by a unique QR code.
"""
__version__ = "1.0.0"
