from .apigateway import default_validation_layer, make_lambda_handler, to_proxy_response

__all__ = ["default_validation_layer", "make_lambda_handler", "to_proxy_response"]
