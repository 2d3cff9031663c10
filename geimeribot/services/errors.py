"""Errors raised by the external provider clients"""


class ProviderError(Exception):
    """An external data source could not be fetched or parsed"""
