"""
Agent Configuration Table

This module defines the authoritative, read-only mapping from agent role to
its settings: system prompt, tool names, model, sampling parameters and
retrieval settings. Roles differ only in data, so the table is the whole
agent definition.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Final, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class AgentRole(str, Enum):
    BOOKING = "booking"           # Appointment management
    PRODUCT = "product"           # Service info
    CUSTOMER_SERVICE = "support"  # Support & questions
    SALES = "sales"               # Upsell & recommendations
    CARE = "care"                 # Aftercare
    ADMIN = "admin"               # Admin queries


class RetrieverSettings(BaseModel):
    top_k: int = Field(..., ge=1)
    filters: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class AgentConfig(BaseModel):
    role: AgentRole
    system_prompt: str
    tools: Tuple[str, ...] = ()
    model: str
    temperature: float = Field(..., ge=0.0, le=2.0)
    max_tokens: int = Field(..., ge=1)
    retriever_settings: RetrieverSettings

    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------
# Agent Table
# ---------------------------------------------------------------------

_BOOKING = AgentConfig(
    role=AgentRole.BOOKING,
    model="gpt-4o-mini",
    temperature=0.5,
    max_tokens=1500,
    tools=(
        "search_availability",
        "check_artist_schedule",
        "create_appointment",
        "apply_coupon",
        "send_confirmation",
    ),
    system_prompt="""
# Black Ink - Booking Assistant

Eres un asistente especializado en reservar tatuajes. Tu objetivo es:
1. Entender las necesidades del cliente
2. Buscar disponibilidad optima
3. Sugerir artistas apropiados
4. Confirmar detalles
5. Gestionar depósitos

## Flujo de Conversación
- Pregunta: "¿Qué tipo de tatuaje deseas?" (consultar KB sobre estilos)
- Sugerir: "Basado en tu preferencia, te recomiendo al artista X"
- Confirmar: Hora, artista, depósito requerido
- Finalizar: Enviar confirmación por email

## Restricciones
- NUNCA prometas disponibilidad sin verificar
- SIEMPRE confirma detalles antes de crear cita
- Si hay conflicto: Ofrece alternativas
- Depósito obligatorio: $50-150 según servicio
""",
    retriever_settings=RetrieverSettings(
        top_k=5,
        # pricing is relevant for bookings
        filters={"category": {"$in": ["booking", "pricing", "services"]}},
    ),
)

_PRODUCT = AgentConfig(
    role=AgentRole.PRODUCT,
    model="gpt-4o-mini",
    temperature=0.6,
    max_tokens=1200,
    tools=(
        "search_portfolio",
        "search_services",
        "get_artist_info",
        "get_pricing",
    ),
    system_prompt="""
# Black Ink - Product Specialist

Eres experto en tatuajes. Tu misión es:
1. Describir nuestros servicios
2. Sugerir diseños según preferencia
3. Explicar procesos
4. Responder preguntas técnicas
5. Recomendar artistas

## Información Clave
- Tenemos 5 artistas especializados
- Estilos: Geométrico, Realista, Tribal, Color, B&N
- Precios: $150-500 (depende de tamaño/complejidad)
- Garantía: 100% satisfacción o reembolso

## Personalización
Si cliente menciona:
- "Quiero algo pequeño": Mostrar portfolio <3 pulgadas
- "Colores": Mostrar trabajo en color del mejor artista
- "Realista": Recomendaciones de artista top
""",
    retriever_settings=RetrieverSettings(
        top_k=8,
        filters={"category": {"$in": ["services", "pricing"]}},
    ),
)

_CUSTOMER_SERVICE = AgentConfig(
    role=AgentRole.CUSTOMER_SERVICE,
    model="gpt-4o",
    temperature=0.7,
    max_tokens=2000,
    tools=(
        "search_faqs",
        "search_policies",
        "get_appointment_status",
        "escalate_to_human",
    ),
    system_prompt="""
# Black Ink - Customer Support

Eres especialista en soporte. Respondes:
1. Preguntas frecuentes
2. Problemas de citas
3. Políticas de cancelación
4. Reembolsos
5. Quejas y sugerencias

## Flujo de Escalación
- Intenta resolver con KB
- Si no logras: "Necesitas hablar con nuestro equipo"
- Escala a admin con contexto completo

## Empatía Crítica
- Cliente frustrado: EMPATÍA primero
- Cliente nuevo: BIENVENIDA cálida
- Cliente VIP: RECONOCIMIENTO especial
""",
    retriever_settings=RetrieverSettings(
        top_k=10,
        filters={"category": {"$in": ["pricing", "services"]}},
    ),
)

_SALES = AgentConfig(
    role=AgentRole.SALES,
    model="gpt-4o-mini",
    temperature=0.6,
    max_tokens=1000,
    tools=(
        "get_packages",
        "calculate_discount",
        "suggest_complementary_services",
        "track_client_history",
    ),
    system_prompt="""
# Black Ink - Sales Assistant

Tu objetivo es VENDER sin presionar:
1. Identificar oportunidades
2. Recomendar upgrades
3. Aplicar descuentos estratégicos
4. Cross-sell servicios

## Psicología de Venta
- "Este cliente siempre elige B&N, ¿le muestro combo con color?"
- Social proof: "5/5 estrellas del artista para este estilo"
- Limited time: "Descuento 10% válido hoy"
""",
    retriever_settings=RetrieverSettings(
        top_k=5,
        # Range match: documents are stored with priority 5, so an exact
        # priority 4 match would return nothing
        filters={"priority": {"$gte": 4}},
    ),
)

_CARE = AgentConfig(
    role=AgentRole.CARE,
    model="gpt-4o",
    temperature=0.5,
    max_tokens=1500,
    tools=("search_care_guide", "send_care_pdf", "track_healing_stage"),
    system_prompt="""
# Black Ink - Aftercare Expert

Especialista en cuidados post-tatuaje:
1. Instrucciones inmediatas (primeras 24h)
2. Guía semanal
3. Resolución de problemas
4. Complicaciones & cuándo ver doctor

## Educación Clave
- Días 1-3: Proceso de curación
- Semana 1-2: Posible picazón (normal)
- Semana 3-4: Completamente cicatrizado
""",
    retriever_settings=RetrieverSettings(
        top_k=7,
        # Aftercare documents are tagged by category; their source is "care_guide"
        filters={"category": {"$in": ["care"]}},
    ),
)

_ADMIN = AgentConfig(
    role=AgentRole.ADMIN,
    model="gpt-4o",
    temperature=0.4,
    max_tokens=2000,
    tools=(
        "query_analytics",
        "get_artist_stats",
        "export_data",
        "manage_promotions",
    ),
    system_prompt="""
# Black Ink - Admin Assistant

Panel de control para administradores:
1. Analytics en tiempo real
2. Gestión de artistas
3. Reportes financieros
4. Optimización de operaciones
""",
    retriever_settings=RetrieverSettings(top_k=5),
)


AGENT_CONFIGS: Final[Mapping[AgentRole, AgentConfig]] = MappingProxyType({
    config.role: config
    for config in (_BOOKING, _PRODUCT, _CUSTOMER_SERVICE, _SALES, _CARE, _ADMIN)
})

# Fallback for greetings, ambiguous and unclassifiable messages
DEFAULT_ROLE: Final[AgentRole] = AgentRole.PRODUCT


def get_agent_config(role: AgentRole) -> AgentConfig:
    return AGENT_CONFIGS[role]
