"""
Synthesizer

Answers a user question from the assembled context with one completion
call. The context is embedded in the system prompt; prior chat turns are
passed through as history.
"""

import logging
from typing import Dict, List, Optional

from ..common.llm_client import Completion, LLMClient

logger = logging.getLogger("cohort.retriever.synthesizer")


SYSTEM_PROMPT = """You are a helpful assistant for an educational organization that runs summer programs for students. You have access to student data from its programs.

IMPORTANT INSTRUCTIONS:
1. Answer questions ONLY using the provided context data
2. If you cannot find specific information in the context, clearly state "I don't have that information in the available data"
3. For numerical questions (counts, totals), provide exact numbers when possible
4. When mentioning schools, include common variations (e.g., "TVS schools include TVS Academy Hosur, TVS Tumkur, etc.")
5. For questions about specific years/programs, be precise about which program you're referencing
6. If asked about data not present in the context, suggest what data would be needed

CONTEXT DATA:
{context}

RESPONSE FORMAT:
- Be concise but comprehensive
- Use bullet points for lists
- Include relevant details like program names, years, and student categories
- If providing counts or statistics, show your reasoning
- Always maintain student privacy - don't share personal contact information unless specifically requested for operational purposes

Remember: You help program staff understand their program data. Be helpful, accurate, and professional."""


def build_system_prompt(context: str) -> str:
    return SYSTEM_PROMPT.format(context=context)


class Synthesizer:
    """Generates answers from retrieved context"""

    def __init__(self, llm_client: LLMClient):
        self._llm = llm_client

    @property
    def has_llm(self) -> bool:
        return self._llm.is_available

    def answer(
        self,
        query: str,
        context: str,
        history: Optional[List[Dict[str, str]]] = None,
    ) -> Completion:
        """
        Answer query using context.

        Raises:
            CollaboratorFailure: completion call failed
        """
        return self._llm.complete(build_system_prompt(context), history or [], query)
