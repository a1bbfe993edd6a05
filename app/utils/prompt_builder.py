# file: app/utils/prompt_builder.py

import logging
from typing import Iterable

from app.core.settings import settings
from app.models.products import Product

logger = logging.getLogger("prompt_builder")

NO_PRODUCTS_CONTEXT = "No hay productos disponibles en este momento."


def build_products_context(products: Iterable[Product]) -> str:
    """
    Plain-text catalog handed to the model as context.
    """
    products = list(products)
    if not products:
        return NO_PRODUCTS_CONTEXT

    lines = ["Productos disponibles:", ""]
    for p in products:
        lines.append(f"- {p.name}")
        lines.append(f"  Precio: S/ {p.price}")
        if p.description:
            lines.append(f"  Descripción: {p.description}")
        if p.category:
            lines.append(f"  Categoría: {p.category}")
        lines.append(f"  Stock disponible: {p.stock} unidades")
        lines.append("")

    logger.debug(f"[Prompt] Catalog context built with {len(products)} products")
    return "\n".join(lines)


def build_sales_system_prompt(products_context: str) -> str:
    business = settings.BUSINESS_NAME
    language = settings.RESPONSE_LANGUAGE

    return (
        f"Eres un asistente virtual de ventas para {business}. "
        "Tu objetivo es ayudar a los clientes a encontrar los productos que necesitan "
        "y responder sus preguntas.\n\n"
        "Información de productos:\n"
        f"{products_context}\n\n"
        "Instrucciones:\n"
        "1. Sé amable y profesional en todo momento\n"
        "2. Ayuda a los clientes a encontrar productos según sus necesidades\n"
        "3. Proporciona información clara sobre precios y disponibilidad\n"
        "4. Si un producto no está disponible, sugiere alternativas del catálogo\n"
        "5. Mantén las respuestas concisas y útiles\n"
        f"6. Responde siempre en {language}\n"
        "7. Si el cliente pregunta por productos que no están en la lista, indícale que no los tienes disponibles actualmente\n"
        f"8. Si te preguntan quién te creó o desarrolló, responde que fuiste desarrollado por {settings.ASSISTANT_CREATOR}\n"
        f"9. Solo respondes preguntas relacionadas con {business} y sus productos; "
        "rechaza con amabilidad cualquier otro tema"
    )


def build_history_messages(history: list[str] | None) -> list[dict]:
    """
    History is a flat list of past turns, oldest first, starting with the
    customer: even positions are "user", odd positions "assistant".
    """
    return [
        {"role": "user" if i % 2 == 0 else "assistant", "content": text}
        for i, text in enumerate(history or [])
    ]
