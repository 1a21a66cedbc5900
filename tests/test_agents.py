from unittest.mock import AsyncMock, MagicMock

import pytest

from black_ink_assistant.agents.config import (
    AGENT_CONFIGS,
    DEFAULT_ROLE,
    AgentRole,
    get_agent_config,
)
from black_ink_assistant.agents.router import (
    AgentRouter,
    build_system_prompt,
    extract_text,
)
from black_ink_assistant.embeddings.models import DocumentType, RetrievalResult
from black_ink_assistant.llm.client import LLMClient, LLMError
from black_ink_assistant.rag.pipeline import RetrievalPipeline
from black_ink_assistant.rag.sources import load_documents


async def _agen(items):
    for item in items:
        yield item


@pytest.fixture
def mock_llm():
    mock = MagicMock(spec=LLMClient)
    mock.complete = AsyncMock(return_value="product")
    mock.stream = MagicMock(side_effect=lambda *args, **kwargs: _agen(["Hola", " mundo"]))
    return mock


@pytest.fixture
def mock_pipeline():
    mock = AsyncMock(spec=RetrievalPipeline)
    mock.search.return_value = [
        RetrievalResult(
            id="chunk-1",
            content="El precio mínimo es de $150.",
            score=1.1,
            source="faq_system",
            category="pricing",
        )
    ]
    return mock


@pytest.fixture
def agent_router(mock_llm, mock_pipeline):
    return AgentRouter(mock_llm, mock_pipeline, classifier_model="gpt-4o-mini")


# ---------------------------------------------------------------------
# Configuration table
# ---------------------------------------------------------------------

def test_every_role_has_a_config():
    assert set(AGENT_CONFIGS) == set(AgentRole)
    for role, config in AGENT_CONFIGS.items():
        assert config.role is role
        assert get_agent_config(role) is config


def test_config_table_values():
    assert AGENT_CONFIGS[AgentRole.CUSTOMER_SERVICE].model == "gpt-4o"
    assert AGENT_CONFIGS[AgentRole.CUSTOMER_SERVICE].retriever_settings.top_k == 10
    assert AGENT_CONFIGS[AgentRole.PRODUCT].retriever_settings.top_k == 8
    assert AGENT_CONFIGS[AgentRole.CARE].retriever_settings.filters == {"category": {"$in": ["care"]}}
    assert AGENT_CONFIGS[AgentRole.SALES].retriever_settings.filters == {"priority": {"$gte": 4}}
    assert AGENT_CONFIGS[AgentRole.ADMIN].retriever_settings.filters is None
    assert DEFAULT_ROLE is AgentRole.PRODUCT


def test_sales_and_care_filters_match_built_in_documents():
    documents = load_documents()
    care_categories = AGENT_CONFIGS[AgentRole.CARE].retriever_settings.filters["category"]["$in"]
    min_priority = AGENT_CONFIGS[AgentRole.SALES].retriever_settings.filters["priority"]["$gte"]

    care = [d for d in documents if d.type is DocumentType.CARE]
    assert care and all(d.metadata.category in care_categories for d in care)
    assert all(d.metadata.priority >= min_priority for d in documents)


def test_config_table_is_read_only():
    with pytest.raises(TypeError):
        AGENT_CONFIGS[AgentRole.ADMIN] = AGENT_CONFIGS[AgentRole.PRODUCT]


# ---------------------------------------------------------------------
# Intent detection
# ---------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "label, expected",
    [
        ("booking", AgentRole.BOOKING),
        ("  Care\n", AgentRole.CARE),
        ("support", AgentRole.CUSTOMER_SERVICE),
        ("sales", AgentRole.SALES),
        ("general", AgentRole.PRODUCT),
        ("no sé", AgentRole.PRODUCT),
        ("", AgentRole.PRODUCT),
    ],
)
async def test_detect_intent_maps_labels(agent_router, mock_llm, label, expected):
    mock_llm.complete.return_value = label

    assert await agent_router.detect_intent("Quiero agendar") is expected


@pytest.mark.asyncio
async def test_classifier_failure_falls_back_to_product(agent_router, mock_llm):
    mock_llm.complete.side_effect = LLMError("down")

    assert await agent_router.detect_intent("hola") is AgentRole.PRODUCT


@pytest.mark.asyncio
async def test_classifier_prompt_contains_message(agent_router, mock_llm):
    await agent_router.detect_intent("¿Cuánto cuesta?")

    messages = mock_llm.complete.await_args.args[0]
    assert '"¿Cuánto cuesta?"' in messages[0]["content"]
    assert mock_llm.complete.await_args.kwargs["temperature"] == 0.3


# ---------------------------------------------------------------------
# Prompt construction
# ---------------------------------------------------------------------

def test_extract_text_variants():
    assert extract_text({"role": "user", "content": "hola"}) == "hola"
    assert extract_text({
        "role": "user",
        "parts": [{"type": "text", "text": "hola"}, {"type": "image"}, {"type": "text", "text": "mundo"}],
    }) == "hola mundo"
    assert extract_text({"role": "user", "content": [{"type": "text", "text": "hey"}]}) == "hey"
    assert extract_text({"role": "user", "content": None}) == ""


def test_system_prompt_for_new_client(mock_pipeline):
    config = AGENT_CONFIGS[AgentRole.BOOKING]
    results = mock_pipeline.search.return_value

    prompt = build_system_prompt(config, results, None)

    assert config.system_prompt in prompt
    assert "Cliente nuevo" in prompt
    assert "### [Fuente: faq_system]\nEl precio mínimo es de $150." in prompt
    assert "SIEMPRE cita tus fuentes" in prompt


def test_system_prompt_serialises_client_context():
    prompt = build_system_prompt(
        AGENT_CONFIGS[AgentRole.CARE],
        [],
        {"userId": "client-1", "preferences": {"preferences": ["estilo geométrico"]}},
    )

    assert '"userId": "client-1"' in prompt
    assert "estilo geométrico" in prompt
    assert "Cliente nuevo" not in prompt


# ---------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_execute_agent_streams_and_completes_once(agent_router, mock_llm, mock_pipeline):
    on_complete = AsyncMock()
    messages = [
        {"role": "user", "content": "Hola"},
        {"role": "assistant", "content": "¿En qué te ayudo?"},
        {"role": "user", "content": "¿Cuánto cuesta reservar?"},
    ]

    run = await agent_router.execute_agent(
        AgentRole.BOOKING, messages, "client-1", None, on_complete=on_complete
    )

    assert run.role is AgentRole.BOOKING
    assert run.sources == mock_pipeline.search.return_value
    mock_pipeline.search.assert_awaited_once_with(
        "¿Cuánto cuesta reservar?",
        5,
        {"category": {"$in": ["booking", "pricing", "services"]}},
    )
    on_complete.assert_not_awaited()

    text = "".join([piece async for piece in run.stream])

    assert text == "Hola mundo"
    on_complete.assert_awaited_once_with("Hola mundo")

    llm_messages = mock_llm.stream.call_args.args[0]
    assert llm_messages[0]["role"] == "system"
    assert [m["content"] for m in llm_messages[1:]] == [m["content"] for m in messages]
    assert mock_llm.stream.call_args.kwargs == {
        "model": "gpt-4o-mini",
        "temperature": 0.5,
        "max_tokens": 1500,
    }
