"""
Reaction and chat assistants.

Two implementations of the same interface:
- LocalAssistant: deterministic lookup, no network
- RemoteAssistant: chat-completions HTTP API (OpenRouter compatible)

RemoteAssistant never lets a network or API error escape: every failure is logged
and answered with the same fallback text the local assistant would give.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from moyenne import config
from moyenne.averages import has_any_grade, semester_average
from moyenne.config import AssistantConfig
from moyenne.model import Semester
from moyenne.reactions import REACTION_FALLBACK, select_reaction

log = logging.getLogger(__name__)


CHAT_ERROR_FALLBACK = "Désolé, il y a eu une erreur. Réessaye plus tard!"
CHAT_EMPTY_FALLBACK = "Désolé, je n'ai pas pu répondre. Réessaye!"

CHATBOT_SYSTEM_PROMPT = """You are an Algerian university student assistant.

Your role:
Help students with grades, averages, modules, coefficients, and semesters.
Answer questions about Kolea studies and schools (ESGEN, EHEC, ESC, ENSSEA).
Talk like a normal Algerian student chatting with a classmate.

Language rules:
Reply ONLY in French Darja (French written in Latin letters with Algerian expressions) OR pure French.
NO Arabic script.
NO Moroccan, Tunisian, or other foreign expressions.
NO broken or invented words.
Write like Algerians type in WhatsApp or Messenger.

Conversation style:
Calm, short sentences (2-4 sentences).
Friendly, natural, reassuring but not exaggerated.
Logical first: answer the question clearly, then add a small human touch.
Don't sound like a teacher, coach, or motivational speaker.

Allowed expressions (examples):
Salam, Tranquille, Ma tqalqech, Normalement, On regarde ça ensemble,
Dis-moi win rak bloqué, C'est clair / c'est simple

Scope:
Only answer questions about: grades, averages, modules, semesters, Kolea studies.
If the question is outside this, politely say: "Désolé, je parle juste des notes et des études à Kolea."
"""


class Assistant(Protocol):
    """Interface used by the CLI and the interactive session."""

    def generate_reaction(self, current: Optional[float], desired: Optional[float], feasible: bool) -> str:
        ...

    def chat(self, message: str, history: Sequence[dict[str, str]], semester: Optional[Semester]) -> str:
        ...


def _current_average(semester: Optional[Semester]) -> Optional[float]:
    if semester is None or not has_any_grade(semester):
        return None
    return semester_average(semester)


class LocalAssistant:
    """Deterministic answers without any network access."""

    def generate_reaction(self, current: Optional[float], desired: Optional[float], feasible: bool) -> str:
        return select_reaction(current, desired, feasible)

    def chat(self, message: str, history: Sequence[dict[str, str]], semester: Optional[Semester]) -> str:
        avg = _current_average(semester)
        if avg is None:
            return "Salam! Le chat en ligne n'est pas activé. Entre tes notes et on regarde ta moyenne ensemble."
        return (
            f"Salam! Le chat en ligne n'est pas activé. Normalement ta moyenne actuelle est {avg:.2f}/20, "
            "choisis un objectif et les modules à rattraper pour voir ce qu'il te faut."
        )


def create_retry_session(retries: int) -> requests.Session:
    """
    HTTP session that retries rate limits and server errors with backoff.
    """
    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=1,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["POST"],
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def build_reaction_context(current: Optional[float], desired: Optional[float], feasible: bool) -> str:
    """
    System prompt describing the student's situation for the reaction request.
    """
    context = "Tu es un assistant motivant pour des étudiants algériens en L2 Économie/Gestion. "
    context += "Tu parles en Darja algérienne (mélange d'arabe algérien et français). "
    context += "Soyez drôle, motivant, et authentique dans le style des étudiants algériens.\n\n"

    if current is not None:
        context += f"L'étudiant a actuellement une moyenne de {current:.2f}/20. "
    else:
        context += "L'étudiant n'a pas encore entré ses notes. "

    if desired is not None:
        context += f"Il vise une moyenne de {desired:g}/20. "

        if current is not None:
            gap = desired - current
            if gap > 0:
                context += f"Il lui manque {gap:.2f} points. "
            elif gap == 0:
                context += "Il a atteint son objectif ! "
            else:
                context += f"Il dépasse son objectif de {abs(gap):.2f} points ! "

        if feasible:
            context += "L'objectif est réalisable. "
        else:
            context += "L'objectif semble difficile à atteindre. "

    context += "\nGénère une réaction courte et motivante en Darja (maximum 2 phrases, avec emojis)."
    return context


def build_chat_system_prompt(semester: Optional[Semester]) -> str:
    prompt = CHATBOT_SYSTEM_PROMPT + "\n\n"
    avg = _current_average(semester)
    if avg is not None:
        prompt += (
            f"CONTEXTE ÉTUDIANT:\nL'étudiant a actuellement une moyenne de {avg:.2f}/20 pour ce semestre. "
            "Utilise cette info pour personnaliser ta réponse."
        )
    return prompt


class RemoteAssistant:
    """
    Chat-completions client. Falls back to fixed text on any failure.
    """

    def __init__(self, cfg: AssistantConfig, session: Optional[requests.Session] = None) -> None:
        if not cfg.api_key:
            raise ValueError("RemoteAssistant needs an API key (MOYENNE_API_KEY)")
        self.cfg = cfg
        self.session = session if session is not None else create_retry_session(cfg.retries)

    def _complete(self, messages: list[dict[str, str]], max_tokens: int) -> Optional[str]:
        """
        Send one completion request and return the message content (None if empty).

        Raises requests.RequestException or ValueError on transport/format errors.
        """
        resp = self.session.post(
            self.cfg.api_url,
            headers={
                "Authorization": f"Bearer {self.cfg.api_key}",
                "Content-Type": "application/json",
                "X-Title": config.APP_TITLE,
            },
            json={
                "model": self.cfg.model,
                "messages": messages,
                "temperature": config.TEMPERATURE,
                "max_tokens": max_tokens,
            },
            timeout=self.cfg.timeout,
        )
        resp.raise_for_status()

        data: Any = resp.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Unexpected response shape: {e}") from e

        if not isinstance(content, str) or not content.strip():
            return None
        return content.strip()

    def generate_reaction(self, current: Optional[float], desired: Optional[float], feasible: bool) -> str:
        messages = [
            {"role": "system", "content": build_reaction_context(current, desired, feasible)},
            {"role": "user", "content": "Donne-moi une réaction motivante en Darja pour cet étudiant."},
        ]
        try:
            content = self._complete(messages, config.REACTION_MAX_TOKENS)
        except (requests.RequestException, ValueError) as e:
            log.warning("Reaction request failed: %s", e)
            return REACTION_FALLBACK
        return content if content is not None else REACTION_FALLBACK

    def chat(self, message: str, history: Sequence[dict[str, str]], semester: Optional[Semester]) -> str:
        messages = [{"role": "system", "content": build_chat_system_prompt(semester)}]
        recent = list(history)[-config.CHAT_HISTORY_LIMIT :]
        messages.extend({"role": h["role"], "content": h["content"]} for h in recent)
        messages.append({"role": "user", "content": message})
        try:
            content = self._complete(messages, config.CHAT_MAX_TOKENS)
        except (requests.RequestException, ValueError) as e:
            log.warning("Chat request failed: %s", e)
            return CHAT_ERROR_FALLBACK
        return content if content is not None else CHAT_EMPTY_FALLBACK


def make_assistant(cfg: AssistantConfig) -> Assistant:
    """
    Pick the assistant implementation from configuration.

    "remote" without an API key degrades to the local assistant.
    """
    if cfg.backend == "remote":
        if cfg.api_key:
            return RemoteAssistant(cfg)
        log.warning("MOYENNE_ASSISTANT=remote but no API key configured; using local assistant")
    return LocalAssistant()
