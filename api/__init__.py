"""HTTP layer: response envelope, middleware, error mapping and routers."""

from api.base import APIResponse, ErrorCodes, error_response, success_response
