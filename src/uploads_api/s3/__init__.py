"""Thin boto3 wrappers for the object store: the CRUD calls the adapter builds on."""
