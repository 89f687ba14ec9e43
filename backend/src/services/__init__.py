"""Business logic services and external collaborators.

This package contains the authentication service along with the clients
it depends on for password resets: the Firebase identity provider and the
SMTP mail relay.
"""
