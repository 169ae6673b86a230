from typing import Optional

from openai import AsyncOpenAI


class OpenAIClient:
    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        self.client = AsyncOpenAI(
            api_key=api_key,
            timeout=120.0,
        )
        self.model = model

    async def generate(self, prompt: str, system: Optional[str] = None, temperature: float = 0.3) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
        )
        if not response.choices:
            raise ValueError("No response from OpenAI API")
        return (response.choices[0].message.content or "").strip()


def create_llm_client(api_key: Optional[str], model: str = "gpt-4o-mini") -> Optional[OpenAIClient]:
    """
    API key가 없으면 None → leaf stage들이 fallback 텍스트 사용
    """
    if not api_key:
        return None
    return OpenAIClient(api_key, model=model)
