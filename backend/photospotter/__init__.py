"""PhotoSpotter backend package"""
