"""OpenAPI document and Swagger UI page for the catalog HTTP API."""

from .models import ErrorMessage, NewProduct, Product, UploadTarget

API_TITLE = "Product Service API"
API_VERSION = "1.0.0"

SWAGGER_UI_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Product Service API</title>
  <link rel="stylesheet" href="https://unpkg.com/swagger-ui-dist@5/swagger-ui.css">
</head>
<body>
  <div id="swagger-ui"></div>
  <script src="https://unpkg.com/swagger-ui-dist@5/swagger-ui-bundle.js"></script>
  <script>
    window.onload = function () {
      window.ui = SwaggerUIBundle({
        url: window.location.pathname.replace(/\\/[^/]*$/, "/swagger.json"),
        dom_id: "#swagger-ui",
      });
    };
  </script>
</body>
</html>
"""


def _ref(name: str) -> dict:
    return {"$ref": f"#/components/schemas/{name}"}


def _json_content(schema: dict) -> dict:
    return {"application/json": {"schema": schema}}


def _error(description: str) -> dict:
    return {"description": description, "content": _json_content(_ref("ErrorMessage"))}


def _components() -> dict:
    schemas = {}
    for model in (NewProduct, Product, UploadTarget, ErrorMessage):
        schema = model.model_json_schema(by_alias=True, ref_template="#/components/schemas/{model}")
        schemas.update(schema.pop("$defs", {}))
        schemas[model.__name__] = schema
    return {
        "schemas": schemas,
        "securitySchemes": {"basicAuth": {"type": "http", "scheme": "basic"}},
    }


def build_openapi_spec() -> dict:
    """Build the OpenAPI 3 description of every HTTP route."""
    return {
        "openapi": "3.0.3",
        "info": {
            "title": API_TITLE,
            "version": API_VERSION,
            "description": "Product catalog and CSV import API",
        },
        "paths": {
            "/products": {
                "get": {
                    "summary": "List all products with stock counts",
                    "responses": {
                        "200": {
                            "description": "All products",
                            "content": _json_content({"type": "array", "items": _ref("Product")}),
                        },
                        "500": _error("Internal server error"),
                    },
                },
                "post": {
                    "summary": "Create a product and its stock record",
                    "requestBody": {"required": True, "content": _json_content(_ref("NewProduct"))},
                    "responses": {
                        "201": {"description": "Product created", "content": _json_content(_ref("Product"))},
                        "400": _error("Invalid product data"),
                        "500": _error("Internal server error"),
                    },
                },
            },
            "/products/{productId}": {
                "get": {
                    "summary": "Get one product with its stock count",
                    "parameters": [
                        {"name": "productId", "in": "path", "required": True, "schema": {"type": "string"}}
                    ],
                    "responses": {
                        "200": {"description": "The product", "content": _json_content(_ref("Product"))},
                        "400": _error("Product ID is required"),
                        "404": _error("Product not found"),
                        "500": _error("Internal server error"),
                    },
                },
            },
            "/import": {
                "get": {
                    "summary": "Get a signed URL for uploading a products CSV file",
                    "security": [{"basicAuth": []}],
                    "parameters": [
                        {"name": "name", "in": "query", "required": True, "schema": {"type": "string"}}
                    ],
                    "responses": {
                        "200": {"description": "Signed upload URL", "content": _json_content(_ref("UploadTarget"))},
                        "400": _error("Missing or invalid file name"),
                        "401": {"description": "Missing or malformed credentials"},
                        "403": {"description": "Access denied"},
                        "500": _error("Internal server error"),
                    },
                },
            },
        },
        "components": _components(),
    }
