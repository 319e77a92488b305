"""Shared schema documents for the apigen tests.

Each fixture returns a fresh raw document (the JSON shape the library's
reflection layer emits) so tests may mutate it freely.
"""

from __future__ import annotations

import copy
import json
import logging

import pytest

from apigen.codegen.core.resolver import resolve


# ---------------------------------------------------------------------------
# Raw type helpers
# ---------------------------------------------------------------------------

def ref(name: str) -> dict:
    return {"type": "Ref", "ref_name": name}


def number(**kwargs) -> dict:
    node = {"type": "Number", "number_type": "UInt", "number_size": 32}
    node.update(kwargs)
    return node


def struct(*fields: dict, **kwargs) -> dict:
    node = {"type": "Struct", "struct_fields": list(fields)}
    node.update(kwargs)
    return node


def named(name: str, node: dict, **kwargs) -> dict:
    result = dict(node, name=name)
    result.update(kwargs)
    return result


def arc(arg: str) -> dict:
    return {"type": "Generic", "generic_name": "Arc", "generic_args": [ref(arg)]}


CONTEXT_PARAM = named("context", arc("ClientContext"))


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

FOO_DOCUMENT = {
    "version": "1.0.0",
    "modules": [
        {
            "name": "foo",
            "summary": "Foo functions",
            "types": [],
            "functions": [
                {
                    "name": "bar",
                    "summary": "Does bar",
                    "params": [
                        CONTEXT_PARAM,
                        named("params", struct(named("x", number(), summary="The x value"))),
                    ],
                    "result": {"type": "None"},
                },
            ],
        },
    ],
}

SHAPE_DOCUMENT = {
    "version": "1.0.0",
    "modules": [
        {
            "name": "geometry",
            "summary": "Shapes",
            "types": [
                named(
                    "Shape",
                    {
                        "type": "EnumOfTypes",
                        "enum_types": [
                            named("Circle", struct(named("radius", number(number_type="Float"))),
                                  summary="A circle"),
                            named("Point", {"type": "None"}),
                        ],
                    },
                    summary="Any supported shape",
                ),
                named("ParamsOfArea", struct(named("shape", ref("Shape")))),
                named("ResultOfArea", struct(named("area", number(number_type="Float")))),
            ],
            "functions": [
                {
                    "name": "area",
                    "summary": "Computes the area of a shape",
                    "params": [CONTEXT_PARAM, named("params", ref("ParamsOfArea"))],
                    "result": {
                        "type": "Generic",
                        "generic_name": "ClientResult",
                        "generic_args": [ref("ResultOfArea")],
                    },
                },
            ],
        },
    ],
}

SUBSCRIBE_DOCUMENT = {
    "version": "1.0.0",
    "modules": [
        {
            "name": "net",
            "summary": "Network functions",
            "types": [
                named(
                    "ParamsOfSubscribe",
                    {
                        "type": "EnumOfTypes",
                        "enum_types": [
                            named("Ok", struct(named("result", {"type": "String"})),
                                  summary="Delivers a result"),
                        ],
                    },
                    summary="Subscription callbacks",
                ),
                named(
                    "ResultOfSubscribe",
                    {
                        "type": "EnumOfTypes",
                        "enum_types": [named("Ok", struct())],
                    },
                ),
                named("ParamsOfQuery", struct(named("collection", {"type": "String"}))),
                named("ResultOfQuery", struct(named("handle", number()))),
            ],
            "functions": [
                {
                    "name": "subscribe",
                    "summary": "Subscribes to a collection",
                    "params": [
                        CONTEXT_PARAM,
                        named("params", ref("ParamsOfQuery")),
                        named(
                            "obj",
                            {
                                "type": "Generic",
                                "generic_name": "AppObject",
                                "generic_args": [
                                    ref("ParamsOfSubscribe"),
                                    ref("ResultOfSubscribe"),
                                ],
                            },
                        ),
                    ],
                    "result": {
                        "type": "Generic",
                        "generic_name": "ClientResult",
                        "generic_args": [ref("ResultOfQuery")],
                    },
                },
                {
                    "name": "wait_for",
                    "summary": "Waits with progress notifications",
                    "params": [
                        CONTEXT_PARAM,
                        named("params", ref("ParamsOfQuery")),
                        named("request", arc("Request")),
                    ],
                    "result": {"type": "None"},
                },
            ],
        },
    ],
}

MISSING_REF_DOCUMENT = {
    "version": "1.0.0",
    "modules": [
        {
            "name": "broken",
            "types": [named("Holder", struct(named("inner", ref("Missing"))))],
            "functions": [],
        },
    ],
}


@pytest.fixture
def foo_document() -> dict:
    return copy.deepcopy(FOO_DOCUMENT)


@pytest.fixture
def shape_document() -> dict:
    return copy.deepcopy(SHAPE_DOCUMENT)


@pytest.fixture
def subscribe_document() -> dict:
    return copy.deepcopy(SUBSCRIBE_DOCUMENT)


@pytest.fixture
def missing_ref_document() -> dict:
    return copy.deepcopy(MISSING_REF_DOCUMENT)


@pytest.fixture
def foo_schema(foo_document):
    return resolve(foo_document)


@pytest.fixture
def shape_schema(shape_document):
    return resolve(shape_document)


@pytest.fixture
def empty_point_schema(shape_document):
    """Shape schema with ``Point`` encoded as a struct without fields."""
    shape = shape_document["modules"][0]["types"][0]
    shape["enum_types"][1] = named("Point", struct())
    return resolve(shape_document)


@pytest.fixture
def subscribe_schema(subscribe_document):
    return resolve(subscribe_document)


@pytest.fixture
def shared_app_object_schema(subscribe_document):
    """Two modules whose functions take the same app object."""
    subscribe_document["modules"].append({
        "name": "watch",
        "functions": [{
            "name": "follow",
            "params": [
                CONTEXT_PARAM,
                named(
                    "obj",
                    {
                        "type": "Generic",
                        "generic_name": "AppObject",
                        "generic_args": [
                            ref("net.ParamsOfSubscribe"),
                            ref("net.ResultOfSubscribe"),
                        ],
                    },
                ),
            ],
            "result": {"type": "None"},
        }],
    })
    return resolve(subscribe_document)


@pytest.fixture
def write_schema(tmp_path):
    """Write a document to a JSON file and return its path."""

    def _write(document: dict, name: str = "api.json"):
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo ``setup_logging`` so later tests can capture records."""
    yield
    logger = logging.getLogger("apigen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
