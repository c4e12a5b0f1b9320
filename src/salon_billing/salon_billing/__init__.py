"""Salon billing backend: GST configuration, bill ledger, client visit ledger and staff notifications."""
