"""
Email Delivery Gateways.

Each gateway exposes send(EmailMessage) -> DeliveryResult and makes a single
synchronous call to its provider.
"""
