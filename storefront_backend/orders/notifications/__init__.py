"""
Order email notifications: payload shapes, HTML composer and the
provider-backed dispatcher.
"""
