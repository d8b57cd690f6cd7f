"""Compatibility shim for ``${VAR-default}`` image values.

Compose files sometimes parameterise images (``${IMAGE-nginx:stable}``). Compose
interpolation is not available at this layer, so the default is used as-is.
Only the ``${NAME-default}`` / ``${NAME:-default}`` shape is recognised; this is
not an expression evaluator.
"""

from composeapp.domain.shared.error import InvalidReferenceError


def expand_default_placeholder(image: str) -> str:
    """Return the default value of a ``${NAME-default}`` image, or the image unchanged."""
    if not image.startswith("$"):
        return image
    if not image.startswith("${") or not image.endswith("}"):
        raise InvalidReferenceError(
            f"Invalid image reference({image}). This does not look like a properly "
            "formatted ${variable-default}",
            reference=image,
        )
    _, sep, default = image[2:-1].partition("-")
    if not sep:
        raise InvalidReferenceError(
            f"Invalid image reference({image}). Variable does not appear to have a default value",
            reference=image,
        )
    return default
