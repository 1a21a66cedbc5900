"""
Knowledge Base Sources

Built-in studio documents used when an ingest request does not supply its
own. A CMS or database loader would replace ``load_documents``.
"""

from __future__ import annotations

from typing import List

from ..embeddings.models import Document, DocumentMetadata, DocumentType


def load_documents() -> List[Document]:
    return [
        Document(
            type=DocumentType.FAQ,
            title="PF Generales (FAQ)",
            content=(
                "¿Cuánto cuesta un tatuaje? El precio mínimo es de $150. "
                "La tarifa por hora es de $150-200 dependiendo del artista."
            ),
            metadata=DocumentMetadata(source="faq_system", category="pricing", priority=5),
        ),
        Document(
            type=DocumentType.SERVICES,
            title="Servicios de Tatuaje",
            content=(
                "Ofrecemos Diseño Personalizado, Realismo, Tradicional y Cover Ups. "
                "Las consultas son gratuitas."
            ),
            metadata=DocumentMetadata(source="services_db", category="services", priority=5),
        ),
        Document(
            type=DocumentType.POLICIES,
            title="Política de Depósitos",
            content=(
                "Se requiere un depósito no reembolsable para reservar. "
                "$50 para piezas pequeñas, $100 para las grandes."
            ),
            metadata=DocumentMetadata(source="policy_doc", category="booking", priority=5),
        ),
        Document(
            type=DocumentType.CARE,
            title="Guía de Cuidados",
            content=(
                "Mantén el vendaje durante 2-4 horas. Lava con jabón sin aroma. "
                "Aplica una capa fina de Aquaphor o la loción recomendada."
            ),
            metadata=DocumentMetadata(source="care_guide", category="care", priority=5),
        ),
    ]
