#!/usr/bin/env python3
"""
Basic usage examples for the Imbo client library.

The first examples only build URLs and signatures and run without a server.
The request examples need an Imbo server, configured through IMBO_HOST,
IMBO_PUBLIC_KEY and IMBO_PRIVATE_KEY.
"""

import datetime
import os
import sys

from imbo_client import ImboClient, ImboClientError, Query

IMAGE_IDENTIFIER = "61da9892205a0d5077a353eb3487e8c8"


def build_urls():
    """Build image URLs and signatures without talking to a server."""

    print("=== Imbo Client URL Examples ===\n")

    client = ImboClient("http://imbo", "pub", "priv")

    # Example 1: Image URL with transformations
    print("1. Building a transformed image URL...")
    url = client.get_image_url(IMAGE_IDENTIFIER)
    url.flip_vertically().max_size(123, 456).border('#bf1942')
    print(f"   Transformations: {url.get_transformations()}")
    print(f"   Query string: {url.get_query_string()}")
    print(f"   URL: {url}")
    print()

    # Example 2: Output format does not count as a transformation
    print("2. Converting the output format...")
    url.reset().thumbnail(150, 100, 'inset').png()
    print(f"   URL: {url}")
    print(f"   Transformations: {len(url.get_transformations())}")
    print()

    # Example 3: Image listing URL with a query
    print("3. Building an image listing URL...")
    query = Query().limit(5).sort(['size:desc']).metadata()
    print(f"   URL: {client.get_images_url(query)}")
    print()

    # Example 4: Signed URL for a write request
    print("4. Signing a write request...")
    timestamp = datetime.datetime(2012, 10, 3, 12, 43, 37, tzinfo=datetime.timezone.utc)
    signed = client.get_signed_resource_url('PUT', f'/images/{IMAGE_IDENTIFIER}/meta', timestamp)
    print(f"   Signed URL: {signed}")
    print()

    # Example 5: Acting on behalf of another user
    print("5. Acting on behalf of another user...")
    print(f"   URL: {client.user('someuser').get_user_url()}")
    client.close()
    print()


def talk_to_server(server_url, public_key, private_key):
    """Issue requests against a running Imbo server."""

    print("=== Imbo Client Request Examples ===\n")

    with ImboClient(server_url, public_key, private_key) as client:
        try:
            print("6. Fetching server status...")
            status = client.get_server_status()
            print(f"   ✓ Status {status['status']}, server time {status.get('date')}")
            print()

            print("7. Fetching user information...")
            info = client.get_user_info()
            print(f"   ✓ User {info.get('user')} has {info.get('numImages', 0)} images")
            print()

            print("8. Listing images...")
            images, search = client.get_images(Query().limit(5))
            print(f"   ✓ {search.get('hits', 0)} hits, showing {len(images)}")
            for image in images:
                print(f"   - {client.get_image_url(image['imageIdentifier']).thumbnail()}")
            print()
        except ImboClientError as e:
            print(f"Imbo Client Error: {e}")
            sys.exit(1)


def demonstrate_configuration():
    """Demonstrate client configuration options."""

    print("\n=== Configuration Options Example ===")

    client = ImboClient(
        ["http://imbo1", "http://imbo2"],
        "pub",
        "priv",
        user="someuser",
        timeout=60               # 60 second HTTP timeout
    )

    print(f"✓ Client configured with:")
    print(f"  - Hosts: {', '.join(client.hosts)}")
    print(f"  - User: {client.get_user()}")
    print(f"  - HTTP timeout: {client.config['timeout']} seconds")
    print(f"  - Host for {IMAGE_IDENTIFIER}: {client.get_host_for_image_identifier(IMAGE_IDENTIFIER)}")

    client.close()


if __name__ == "__main__":
    build_urls()
    demonstrate_configuration()

    server_url = os.environ.get("IMBO_HOST")
    public_key = os.environ.get("IMBO_PUBLIC_KEY")
    private_key = os.environ.get("IMBO_PRIVATE_KEY")
    if server_url and public_key and private_key:
        print()
        talk_to_server(server_url, public_key, private_key)
    else:
        print("\nSet IMBO_HOST, IMBO_PUBLIC_KEY and IMBO_PRIVATE_KEY to run the request examples.")
