"""
Общие фикстуры: компактная спецификация в форме Assets API
"""

import copy
import json

import pytest

ASSETS_SPEC = {
    "openapi": "3.0.1",
    "info": {"title": "Assets REST API", "version": "1.0"},
    "servers": [
        {"url": "https://api.atlassian.com/jsm/assets/workspace/{workspaceId}/v1"}
    ],
    "paths": {
        "/object/{id}": {
            "parameters": [
                {
                    "name": "id",
                    "in": "path",
                    "required": True,
                    "schema": {"type": "string"},
                }
            ],
            "get": {
                "tags": ["Object"],
                "operationId": "getObjectById",
                "summary": "Get object by id",
                "responses": {
                    "200": {
                        "description": "Object",
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/ObjectEntry"}
                            }
                        },
                    }
                },
            },
        },
        "/object/aql": {
            "post": {
                "tags": ["Object"],
                "operationId": "postObjectAql",
                "summary": "Find objects with AQL",
                "parameters": [
                    {"name": "startAt", "in": "query", "schema": {"type": "integer"}},
                    {
                        "name": "maxResults",
                        "in": "query",
                        "schema": {"type": "integer", "default": 50},
                    },
                    {
                        "name": "asc",
                        "in": "query",
                        "description": "Sort order",
                        "schema": {
                            "type": "boolean",
                            "default": "Uses the Jira setting for sort order",
                        },
                    },
                ],
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/AqlQuery"}
                        }
                    },
                },
                "responses": {
                    "200": {
                        "description": "Result page",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "$ref": "#/components/schemas/ObjectListResult"
                                }
                            }
                        },
                    }
                },
            }
        },
        "/objectschema/list": {
            "get": {
                "tags": ["Objectschema"],
                "operationId": "getObjectschemaList",
                "responses": {
                    "200": {
                        "description": "Schemas",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "array",
                                    "items": {
                                        "$ref": "#/components/schemas/ObjectSchema"
                                    },
                                }
                            }
                        },
                    }
                },
            }
        },
        "/config/statustype": {
            "get": {
                "operationId": "getStatusTypes",
                "parameters": [
                    {
                        "name": "X-Request-Source",
                        "in": "header",
                        "schema": {"type": "string"},
                    },
                    {"name": "session", "in": "cookie", "schema": {"type": "string"}},
                ],
                "responses": {"200": {"description": "Status types"}},
            }
        },
    },
    "components": {
        "schemas": {
            "ObjectEntry": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string"},
                    "label": {"type": "string"},
                    "objectKey": {"type": "string"},
                    "objectType": {"$ref": "#/components/schemas/ObjectType"},
                    "attributes": {
                        "type": "array",
                        "items": {"$ref": "#/components/schemas/ObjectAttribute"},
                    },
                },
            },
            "ObjectType": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                },
            },
            "ObjectAttribute": {
                "type": "object",
                "properties": {
                    "objectTypeAttributeId": {"$ref": "#/components/schemas/ObjectId"},
                    "objectAttributeValues": {
                        "type": "array",
                        "items": {"type": "object"},
                    },
                },
            },
            "AqlQuery": {
                "type": "object",
                "required": ["qlQuery"],
                "properties": {"qlQuery": {"type": "string"}},
            },
            "ObjectListResult": {
                "type": "object",
                "properties": {
                    "startAt": {"type": "integer"},
                    "total": {"type": "integer"},
                    "values": {
                        "type": "array",
                        "items": {"$ref": "#/components/schemas/ObjectEntry"},
                    },
                },
            },
            "ObjectSchema": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "status": {"$ref": "#/components/schemas/SchemaStatus"},
                },
            },
            "SchemaStatus": {"type": "string", "enum": ["Ok", "Warning"]},
            "ObjectId": {"type": "string"},
        }
    },
}


@pytest.fixture
def assets_spec():
    return copy.deepcopy(ASSETS_SPEC)


@pytest.fixture
def spec_file(tmp_path, assets_spec):
    path = tmp_path / "assets-openapi.json"
    path.write_text(json.dumps(assets_spec), encoding="utf-8")
    return path


@pytest.fixture
def credentials_env():
    return {
        "ASSETS_API_TOKEN": "token-123",
        "JIRA_EMAIL": "user@example.com",
    }
