"""onboarder.integrations — External service gateway modules.

All outbound HTTP calls to the issue tracker must go through a gateway
in this package, never via bare `requests` calls in services or blueprints.

Current gateways:
  redmine_gateway.RedmineGateway — Redmine REST API
"""
