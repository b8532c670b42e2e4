"""Convenience wrappers for common Salesforce REST resources.

Every method returns the raw response of the underlying rest client;
nothing is parsed here.
"""

from typing import Any, Dict, Iterable, Optional, Union

from .client import SalesforceRestClient
from .utils.http.options import DATA_API_PATH


class Restforce:
    """Thin resource facade over a :class:`SalesforceRestClient`.

    :param client: Rest client used for every call
    :type client: SalesforceRestClient
    """

    def __init__(self, client: SalesforceRestClient):
        self.client = client

    def query(self, soql: str) -> Any:
        """Run a SOQL query."""
        return self.client.request("GET", "query", {"params": {"q": soql}})

    def query_all(self, soql: str) -> Any:
        """Run a SOQL query including deleted and archived records."""
        return self.client.request("GET", "queryAll", {"params": {"q": soql}})

    def get_next(self, next_records_url: str) -> Any:
        """Fetch the next batch of a query.

        :param next_records_url: ``nextRecordsUrl`` from a query response,
            an instance-relative path such as
            ``/services/data/v45.0/query/01gD0000002HU6KIAW-2000``
        """
        prefix = f"{DATA_API_PATH}{self.client.api_version}/"
        if next_records_url.startswith(prefix):
            # Resolved per attempt, so a refresh to another instance is followed
            return self.client.request("GET", next_records_url[len(prefix):])
        instance_url = self.client.credential.instance_url
        return self.client.request("GET", f"{instance_url}{next_records_url}")

    def limits(self) -> Any:
        """Get the org's API limits."""
        return self.client.request("GET", "limits")

    def describe(self, sobject: str) -> Any:
        """Describe an sobject type."""
        return self.client.request("GET", f"sobjects/{sobject}/describe")

    def find(
        self,
        sobject: str,
        record_id: str,
        fields: Optional[Union[str, Iterable[str]]] = None,
    ) -> Any:
        """Retrieve a record by id, optionally restricted to some fields."""
        options: Dict[str, Any] = {}
        if fields:
            if not isinstance(fields, str):
                fields = ",".join(fields)
            options["params"] = {"fields": fields}
        return self.client.request("GET", f"sobjects/{sobject}/{record_id}", options)

    def create(self, sobject: str, data: Dict[str, Any]) -> Any:
        """Create a record."""
        return self.client.request("POST", f"sobjects/{sobject}", {"json": data})

    def update(self, sobject: str, record_id: str, data: Dict[str, Any]) -> Any:
        """Update fields of a record."""
        return self.client.request(
            "PATCH", f"sobjects/{sobject}/{record_id}", {"json": data}
        )

    def delete(self, sobject: str, record_id: str) -> Any:
        """Delete a record."""
        return self.client.request("DELETE", f"sobjects/{sobject}/{record_id}")

    def user_info(self) -> Any:
        """Get details of the user the credential belongs to."""
        return self.client.request("GET", self.client.get_resource_owner_url())
