"""
Client package for the chat relay.

A thin terminal client: forwards typed lines to the relay and prints
whatever the relay sends back.
"""
