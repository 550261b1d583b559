"""Group reply templates.

Templates contain static French text with placeholders for allowed params
only. Text is rendered in-memory at send time, never persisted.
"""

from typing import Any

TEMPLATES: dict[str, dict[str, Any]] = {
    "order_created": {
        "text": (
            "✅ Livraison #{order_id} enregistrée\n"
            "📱 {phone}\n"
            "📦 {items}\n"
            "💰 {amount_due} FCFA"
        ),
        "allowed_params": ["order_id", "phone", "items", "amount_due"],
    },
    "payment_recorded": {
        "text": (
            "💰 Livraison #{order_id}: {amount_paid} FCFA payés sur {amount_due} FCFA"
        ),
        "allowed_params": ["order_id", "amount_paid", "amount_due"],
    },
    "status_updated": {
        "text": "🔄 Livraison #{order_id}: statut {status}",
        "allowed_params": ["order_id", "status"],
    },
    "invalid_format": {
        "text": "❌ {error}\n\n📋 Format attendu:\n{expected_format}",
        "allowed_params": ["error", "expected_format"],
    },
}


class UnknownTemplateError(ValueError):
    """Template key is not defined."""


def format_amount(amount: float | None) -> str:
    """FCFA amount without a trailing .0 ("15000", "2500.5")."""
    if amount is None:
        return "0"
    return str(int(amount)) if amount == int(amount) else f"{amount:.2f}"


def render(template_key: str, params: dict[str, Any]) -> str:
    """Render template with params. Validates allowed_params.

    Args:
        template_key: Template identifier.
        params: Parameters to interpolate (must be in allowed_params).

    Returns:
        Rendered text string.

    Raises:
        UnknownTemplateError: If template_key is unknown.
        ValueError: If params contains disallowed keys or misses one.
    """
    if template_key not in TEMPLATES:
        raise UnknownTemplateError(f"Unknown template: {template_key}")

    template = TEMPLATES[template_key]
    allowed = set(template["allowed_params"])
    provided = set(params.keys())

    extras = provided - allowed
    if extras:
        raise ValueError(f"Disallowed params for {template_key}: {extras}")

    missing = allowed - provided
    if missing:
        raise ValueError(f"Missing params for {template_key}: {missing}")

    return template["text"].format(**params)
