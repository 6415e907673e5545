"""
Integration tests for the Imbo client against a running Imbo server.

Set IMBO_HOST, IMBO_PUBLIC_KEY and IMBO_PRIVATE_KEY to run them; optionally
IMBO_IMAGE_IDENTIFIER to an image owned by the public key.
"""

import os

import pytest
import requests

from imbo_client import HTTPError, ImboClient


class TestIntegration:
    """Integration tests with an Imbo server."""
    SERVER_URL = os.environ.get("IMBO_HOST")
    PUBLIC_KEY = os.environ.get("IMBO_PUBLIC_KEY")
    PRIVATE_KEY = os.environ.get("IMBO_PRIVATE_KEY")
    IMAGE_IDENTIFIER = os.environ.get("IMBO_IMAGE_IDENTIFIER")

    @pytest.fixture(scope="class", autouse=True)
    def imbo_server(self):
        """Skip unless an Imbo server is configured and reachable."""
        if not (self.SERVER_URL and self.PUBLIC_KEY and self.PRIVATE_KEY):
            pytest.skip("IMBO_HOST, IMBO_PUBLIC_KEY and IMBO_PRIVATE_KEY are not set")

        try:
            requests.get(f"{self.SERVER_URL.rstrip('/')}/status", timeout=5)
        except requests.RequestException as e:
            pytest.skip(f"Could not reach Imbo server: {e}")

    @pytest.fixture
    def client(self):
        """Create Imbo client."""
        with ImboClient(self.SERVER_URL, self.PUBLIC_KEY, self.PRIVATE_KEY) as client:
            yield client

    @pytest.fixture
    def image_identifier(self):
        if not self.IMAGE_IDENTIFIER:
            pytest.skip("IMBO_IMAGE_IDENTIFIER is not set")
        return self.IMAGE_IDENTIFIER

    def test_server_status(self, client):
        info = client.get_server_status()

        assert info["status"] == 200
        assert "date" in info

    def test_user_info(self, client):
        info = client.get_user_info()
        assert info["user"] == self.PUBLIC_KEY

    def test_wrong_private_key_is_rejected(self):
        client = ImboClient(self.SERVER_URL, self.PUBLIC_KEY, "wrong-private-key")

        with pytest.raises(HTTPError) as excinfo:
            client.get_user_info()

        assert excinfo.value.status_code in (400, 401, 403)

    def test_transformed_image_url(self, client, image_identifier):
        url = client.get_image_url(image_identifier).thumbnail(40, 40).border('#bf1942').png()
        response = requests.get(str(url), timeout=10)

        assert response.status_code == 200
        assert response.headers["Content-Type"] == "image/png"

    def test_tampered_image_url_is_rejected(self, client, image_identifier):
        url = str(client.get_image_url(image_identifier).thumbnail(40, 40))
        response = requests.get(url.replace("width%3D40", "width%3D41"), timeout=10)

        assert response.status_code in (400, 401, 403)

    def test_metadata_round_trip(self, client, image_identifier):
        client.replace_metadata(image_identifier, {"integration": "test"})
        assert client.get_metadata(image_identifier)["integration"] == "test"

        client.delete_metadata(image_identifier)
        assert "integration" not in client.get_metadata(image_identifier)
