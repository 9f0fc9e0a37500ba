"""Point-of-sale order and fulfillment engine."""
