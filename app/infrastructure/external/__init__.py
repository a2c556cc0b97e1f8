"""Outbound adapters: channel senders and webhook client."""
