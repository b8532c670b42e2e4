"""Credential exchangers for Restforce."""

from .salesforce import AsyncSalesforceProvider, SalesforceProvider

__all__ = ["SalesforceProvider", "AsyncSalesforceProvider"]
