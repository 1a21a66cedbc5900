"""
Prompt Templates

Shared prompt text for intent classification, insight extraction and the
answer constraints appended to every agent's system prompt. Agent-specific
prompts live with the agent table in ``agents/config.py``.
"""

INTENT_CLASSIFICATION_PROMPT = """Clasifica el siguiente mensaje en UNA de estas categorías:
- booking: Quiere agendar una cita
- product: Pregunta sobre servicios/diseños/artistas
- support: Problema con cita, cancelación, reembolso
- sales: Quiere información de ofertas/paquetes
- care: Pregunta sobre cuidados post-tatuaje
- admin: Solo personal administrativo
- general: Saludos, charla casual o preguntas ambiguas

Mensaje: "{message}"

Responde SOLO con la categoría."""


INSIGHT_EXTRACTION_PROMPT = """Extract important insights from this client message:
"{message}"

Format JSON:
{{
  "preferences": ["style preference", "artist preference"],
  "history": ["previous tattoo info"],
  "notes": ["important observation"],
  "medical": ["allergies", "healing issues"]
}}
Return ONLY JSON."""


NEW_CLIENT_CONTEXT = "Cliente nuevo"


AGENT_SYSTEM_PROMPT = """
{agent_prompt}

## Contexto de Cliente
{client_context}

## Documentos Base de Conocimiento (RAG Context)
{knowledge}

## Restricciones Generales
- SIEMPRE cita tus fuentes si usas la Base de Conocimiento
- No inventes información
- Si no sabes: "No encuentro esta información, déjame conectarte con nuestro equipo"
- Respuestas máximo 3 párrafos
- Sé conciso y profesional, tono Premium/Elegante
"""
