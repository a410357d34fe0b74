# typeahead/prompts/prompt_builder.py

from typing import List, Optional, Sequence

from typeahead.prompts.system_prompts import (
    CHAT_SYSTEM_PROMPT,
    CHAT_WITH_CONTEXT_SYSTEM_PROMPT,
)


NO_CONTEXT = "No specific context available."


def build_context_block(context_chunks: Sequence[str]) -> str:

    if not context_chunks:
        return NO_CONTEXT

    return "\n\n".join(
        f"[Context {i + 1}]: {chunk}"
        for i, chunk in enumerate(context_chunks)
    )


def build_word_prompt(
    full_text: str,
    incomplete_word: str,
    context_chunks: Optional[Sequence[str]] = None,
) -> str:
    """
    Word-completion user prompt.

    Without context chunks this is the plain fallback prompt.
    """

    if context_chunks is None:
        return (
            f'Context: "{full_text}"\n'
            f'Incomplete word: "{incomplete_word}"\n\n'
            "Complete this word in a way that makes sense in the context. "
            "Return ONLY the completed word, nothing else."
        )

    return f"""
Full text: "{full_text}"
Incomplete word: "{incomplete_word}"

Context from knowledge base:
{build_context_block(context_chunks)}

Complete the word "{incomplete_word}". Return only the completed word.
""".strip()


def build_phrase_prompt(
    user_input: str,
    context_chunks: Optional[Sequence[str]] = None,
) -> str:

    if context_chunks is None:
        return f'Continue this text naturally: "{user_input}"'

    return f"""
The user is typing: "{user_input}"

Retrieved context from knowledge base:
{build_context_block(context_chunks)}

Based on the context above (if relevant), suggest what should come next after "{user_input}". Return only the continuation, not the full sentence.
""".strip()


def build_chat_system_prompt(context_chunks: List[str]) -> str:

    if not context_chunks:
        return CHAT_SYSTEM_PROMPT.strip()

    context = "\n\n".join(
        f"[{i + 1}] {chunk}" for i, chunk in enumerate(context_chunks)
    )

    return CHAT_WITH_CONTEXT_SYSTEM_PROMPT.format(context=context).strip()
