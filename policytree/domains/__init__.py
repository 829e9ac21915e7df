"""Built-in decision tree domains."""

from typing import Optional

from policytree.domains.customer_segment import CUSTOMER_SEGMENT_DOMAIN, customer_segment_domain
from policytree.domains.fulfillment import FULFILLMENT_DOMAIN, fulfillment_domain
from policytree.domains.payment_rule import PAYMENT_RULE_DOMAIN, payment_rule_domain
from policytree.services.registry import DomainRegistry, default_registry

BUILTIN_DOMAINS = (payment_rule_domain, fulfillment_domain, customer_segment_domain)


def register_builtin_domains(registry: Optional[DomainRegistry] = None) -> DomainRegistry:
    """Register every built-in domain into `registry` (default: the app registry)."""
    registry = registry if registry is not None else default_registry
    for config in BUILTIN_DOMAINS:
        registry.register_domain(config)
    return registry


__all__ = [
    "BUILTIN_DOMAINS",
    "CUSTOMER_SEGMENT_DOMAIN",
    "FULFILLMENT_DOMAIN",
    "PAYMENT_RULE_DOMAIN",
    "customer_segment_domain",
    "fulfillment_domain",
    "payment_rule_domain",
    "register_builtin_domains",
]
