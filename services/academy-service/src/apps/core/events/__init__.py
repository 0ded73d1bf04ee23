"""
Academy Service Events

Publishers for outgoing events and handlers for events from other services.
"""
