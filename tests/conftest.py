"""Shared pytest fixtures for vba-docs tests."""

import json
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from vba_docs.catalog import CatalogClient
from vba_docs.config import CatalogConfig
from vba_docs.models import CodeExample, LibraryRecord


def make_response(status_code=200, body=b"", *, url="https://example.test/", reason=None):
    """Build a real requests.Response without touching the network."""
    if isinstance(body, (dict, list)):
        body = json.dumps(body).encode("utf-8")
    elif isinstance(body, str):
        body = body.encode("utf-8")
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = body
    resp.url = url
    resp.reason = reason or ("OK" if status_code < 400 else "Error")
    return resp


@pytest.fixture
def session():
    """A requests.Session stand-in; set .get.return_value / side_effect."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def config():
    return CatalogConfig(
        api_base_url="https://api.example.test/vba",
        docs_base_url="https://docs.example.test/vba",
        api_key=None,
        timeout_ms=2000,
        cache_ttl_s=0,
    )


@pytest.fixture
def client(config, session):
    return CatalogClient(config, session=session)


def requested_url(session, call_index=-1):
    return session.get.call_args_list[call_index].args[0]


def requested_headers(session, call_index=-1):
    return session.get.call_args_list[call_index].kwargs["headers"]


def example(difficulty="Beginner", category="Range", **kwargs):
    fields = dict(
        id="ex-1",
        title="Fill a range",
        description="",
        code="Range(\"A1\").Value = 1",
        category=category,
        difficulty=difficulty,
    )
    fields.update(kwargs)
    return CodeExample(**fields)


def library(
    name="Excel Worksheet",
    *,
    id="/vba/excel-worksheet",
    office_app="Excel",
    trust_score=5,
    examples=(),
    last_updated=datetime(2024, 1, 15),
    **kwargs,
):
    return LibraryRecord(
        id=id,
        name=name,
        description=kwargs.pop("description", f"{name} helpers"),
        office_app=office_app,
        api_version=kwargs.pop("api_version", "16.0"),
        examples=tuple(examples),
        last_updated=last_updated,
        trust_score=trust_score,
        **kwargs,
    )
