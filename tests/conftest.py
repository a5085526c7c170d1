import json
from pathlib import Path

import pytest
from openproject_client import BasicAuth, OpenProjectClient

BASE_URL = "https://op.example.com"
API = f"{BASE_URL}/api/v3"

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def client():
    cl = OpenProjectClient(BASE_URL, auth=BasicAuth.from_api_key("mock-key"))
    yield cl
    cl.close()
