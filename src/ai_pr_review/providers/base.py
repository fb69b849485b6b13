from abc import ABC, abstractmethod


class LLMProvider(ABC):
    model: str

    @abstractmethod
    async def generate(self, system_prompt: str, prompt: str) -> str:
        """Send prompt to LLM and return its text, "" when there is none."""
        pass
