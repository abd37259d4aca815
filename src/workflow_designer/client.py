"""
Designer API Client - Sync HTTP client for the boundary APIs.

Provides:
- Definitions (/api/definitions)
- Node type catalog (/api/node-types)
- Templates and users (/api/templates, /api/users)

Each call is a single request/response exchange with an explicit timeout
and no retry; callers decide how to degrade on ApiClientError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List
from urllib.parse import urljoin

import requests

from workflow_designer.config import Settings


@dataclass
class ApiConfig:
    """Configuration for the API client."""
    base_url: str
    auth_token: str | None = None
    timeout: int = 30
    verify_ssl: bool = True


class ApiClientError(Exception):
    """Transport or HTTP failure talking to the designer API."""
    pass


class _ResourceClient:
    """Shared request plumbing for one API resource."""

    def __init__(self, config: ApiConfig):
        self.config = config
        self.base_url = config.base_url.rstrip("/") + "/"

    def _request(
        self,
        method: str,
        endpoint: str,
        json_data: Dict[str, Any] | None = None,
        params: Dict[str, Any] | None = None,
    ) -> Any:
        """Make an authenticated request and return the decoded JSON body."""
        url = urljoin(self.base_url, endpoint.lstrip("/"))

        headers = {"Content-Type": "application/json"}
        if self.config.auth_token:
            headers["Authorization"] = f"Bearer {self.config.auth_token}"

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=headers,
                json=json_data,
                params=params,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
            response.raise_for_status()
            if not response.content:
                return {}
            return response.json()
        except requests.exceptions.Timeout:
            raise ApiClientError(f"Request timeout after {self.config.timeout}s")
        except requests.exceptions.ConnectionError as e:
            raise ApiClientError(f"Connection error: {e}")
        except requests.exceptions.HTTPError as e:
            raise ApiClientError(f"HTTP error {e.response.status_code}: {e.response.text}")
        except requests.exceptions.RequestException as e:
            raise ApiClientError(f"Request failed: {e}")
        except ValueError as e:
            raise ApiClientError(f"Invalid JSON response from {url}: {e}")


class DefinitionClient(_ResourceClient):
    """Client for workflow definition APIs."""

    def get(self, definition_id: str) -> Dict[str, Any]:
        """Get a definition record by ID."""
        return self._request("GET", f"/api/definitions/{definition_id}")

    def save(self, payload: Dict[str, Any], definition_id: str | None = None) -> Dict[str, Any]:
        """
        Create or update a definition.

        Args:
            payload: Body with name, description, json and status
            definition_id: Existing ID to update; None creates

        Returns:
            The stored record
        """
        if definition_id:
            return self._request("PUT", f"/api/definitions/{definition_id}", json_data=payload)
        return self._request("POST", "/api/definitions", json_data=payload)

    def list(self) -> List[Dict[str, Any]]:
        result = self._request("GET", "/api/definitions")
        if isinstance(result, dict):
            return result.get("data", [])
        return result


class NodeTypeClient(_ResourceClient):
    """Client for the node type catalog."""

    def list(self) -> Any:
        """Raw catalog payload (bare list or `{success, data, total}` envelope)."""
        return self._request("GET", "/api/node-types")


class ReferenceClient(_ResourceClient):
    """Client for templates and users referenced by node forms."""

    def templates(self) -> List[Dict[str, Any]]:
        result = self._request("GET", "/api/templates", params={"status": "Active"})
        return result.get("data", []) if isinstance(result, dict) else result

    def users(self) -> List[Dict[str, Any]]:
        result = self._request("GET", "/api/users")
        return result.get("data", []) if isinstance(result, dict) else result


class DesignerApiClient:
    """
    Main API client providing access to all resources.
    """

    def __init__(
        self,
        base_url: str,
        auth_token: str | None = None,
        timeout: int = 30,
        verify_ssl: bool = True,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the API (e.g., "http://localhost:5000")
            auth_token: Optional bearer token
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
        """
        self.config = ApiConfig(
            base_url=base_url,
            auth_token=auth_token,
            timeout=timeout,
            verify_ssl=verify_ssl,
        )

        self.definitions = DefinitionClient(self.config)
        self.node_types = NodeTypeClient(self.config)
        self.reference = ReferenceClient(self.config)


def create_client_from_settings(settings: Settings) -> DesignerApiClient | None:
    """
    Create an API client from settings.

    Returns None in offline mode (no api_base_url configured).
    """
    if settings.is_offline:
        return None

    token = settings.api_token.get_secret_value() if settings.api_token else None
    return DesignerApiClient(
        base_url=settings.api_base_url,
        auth_token=token,
        timeout=settings.request_timeout_s,
        verify_ssl=settings.verify_ssl,
    )


__all__ = [
    "ApiClientError",
    "ApiConfig",
    "DesignerApiClient",
    "create_client_from_settings",
]
