from unittest.mock import AsyncMock, MagicMock

import pytest

from core.llm.openai_client import OpenAIClient, create_llm_client


def make_response(content):
    message = MagicMock(content=content)
    return MagicMock(choices=[MagicMock(message=message)])


class TestCreateLlmClient:
    def test_no_key_means_no_client(self):
        assert create_llm_client(None) is None
        assert create_llm_client("") is None

    def test_with_key(self):
        assert isinstance(create_llm_client("sk-test"), OpenAIClient)


class TestGenerate:
    @pytest.mark.asyncio
    async def test_sends_system_and_user_messages(self):
        client = OpenAIClient("sk-test", model="gpt-4o-mini")
        client.client = MagicMock()
        client.client.chat.completions.create = AsyncMock(return_value=make_response("  review  "))

        result = await client.generate("check this", system="be brief")

        assert result == "review"
        kwargs = client.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"] == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "check this"},
        ]

    @pytest.mark.asyncio
    async def test_empty_choices_raise(self):
        client = OpenAIClient("sk-test")
        client.client = MagicMock()
        client.client.chat.completions.create = AsyncMock(return_value=MagicMock(choices=[]))

        with pytest.raises(ValueError):
            await client.generate("check this")
