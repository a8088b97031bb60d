"""Notifications app package.

Stores in-app notifications and sends booking emails. Reacts to booking
events published on the message bus, delivering them through Celery.
"""
