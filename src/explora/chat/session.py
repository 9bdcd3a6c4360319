"""Chat session controller.

A ChatSession owns the thread of one conversation, the current reply
target, and the learner's annotations. It is the only producer of messages:
learner input, assistant answers and highlight branches all go through it.
"""

import logging

from ..config import BRANCH_PROMPT_TEMPLATE, DEFAULT_CONVERSATION_TITLE, FALLBACK_RESPONSE
from ..llm import ChatMessage, LLMProvider
from ..memory import (
    ConfidenceLevel,
    Conversation,
    ConversationMemory,
    Highlight,
    SessionNotes,
)
from ..thread import DuplicateIdError, Message, MessageRole, ThreadGroup, ThreadModel

logger = logging.getLogger(__name__)


class ChatSession:
    """Session-scoped controller for one conversation.

    Hidden design decisions:
    - How the reply target is tracked and reset
    - How the history is flattened for the LLM
    - What the learner sees when the LLM call fails
    - When messages and annotations are persisted
    """

    def __init__(
        self,
        llm: LLMProvider,
        thread: ThreadModel | None = None,
        notes: SessionNotes | None = None,
        memory: ConversationMemory | None = None,
        conversation: Conversation | None = None,
        system_prompt: str | None = None,
    ):
        """Initialize the session.

        Args:
            llm: Provider answering the learner
            thread: Existing thread to continue (new empty thread if None)
            notes: Existing annotations (empty if None)
            memory: Optional backend; messages are persisted as they are appended
            conversation: Stored conversation, required when memory is given
            system_prompt: System prompt (loaded from prompts/tutor.txt if None)
        """
        if memory is not None and conversation is None:
            raise ValueError("A conversation is required when memory is attached")

        if system_prompt is None:
            from ..prompts import get_tutor_prompt
            system_prompt = get_tutor_prompt()

        self._llm = llm
        self._thread = thread if thread is not None else ThreadModel()
        self._notes = notes if notes is not None else SessionNotes()
        self._memory = memory
        self._conversation = conversation
        self._system_prompt = system_prompt
        self._replying_to: str | None = None

    @classmethod
    async def open(
        cls,
        memory: ConversationMemory,
        llm: LLMProvider,
        conversation_id: str | None = None,
        title: str | None = None,
        system_prompt: str | None = None,
    ) -> "ChatSession":
        """Resume a stored conversation, or create a new one.

        Raises:
            ConversationNotFoundError: If conversation_id does not exist
        """
        if conversation_id is None:
            conversation = await memory.create_conversation(title or DEFAULT_CONVERSATION_TITLE)
            thread, notes = ThreadModel(), SessionNotes()
            logger.info("Started conversation %s", conversation.id)
        else:
            conversation = await memory.require_conversation(conversation_id)
            thread = await memory.load_thread(conversation_id)
            notes = await memory.get_notes(conversation_id)
            logger.info("Resumed conversation %s (%d messages)", conversation.id, len(thread))

        return cls(
            llm=llm,
            thread=thread,
            notes=notes,
            memory=memory,
            conversation=conversation,
            system_prompt=system_prompt,
        )

    @property
    def thread(self) -> ThreadModel:
        return self._thread

    @property
    def notes(self) -> SessionNotes:
        return self._notes

    @property
    def conversation(self) -> Conversation | None:
        return self._conversation

    @property
    def replying_to(self) -> str | None:
        """Anchor id the next message will reply to, if any."""
        return self._replying_to

    def groups(self) -> list[ThreadGroup]:
        return self._thread.group()

    # Reply target

    def start_reply(self, message_id: str) -> str:
        """Make the next sent message a reply in the thread of ``message_id``.

        Replies are one level deep, so a reply id resolves to the anchor of
        the group it belongs to.

        Returns:
            The anchor id now targeted

        Raises:
            UnknownMessageError: If the id is not in the thread
        """
        self._thread.get(message_id)
        anchor_id = message_id
        for group in self._thread.group():
            if group.anchor.id == message_id or any(r.id == message_id for r in group.replies):
                anchor_id = group.anchor.id
                break
        self._replying_to = anchor_id
        return anchor_id

    def cancel_reply(self) -> None:
        self._replying_to = None

    # Messaging

    async def send_message(self, content: str) -> tuple[Message, Message]:
        """Send learner input and append the assistant's answer.

        If a reply target is set, both the input and the answer are replies
        to it, and the target is cleared.

        Args:
            content: The learner's text

        Returns:
            (user message, assistant message). The assistant message holds a
            fallback text if the LLM call failed.

        Raises:
            ValueError: If content is empty
        """
        if not content or not content.strip():
            raise ValueError("Message content must not be empty")

        parent_id = self._replying_to
        user_message = await self._append(Message.create(MessageRole.USER, content, parent_id))
        self._replying_to = None

        assistant_message = await self._respond(parent_id)
        return user_message, assistant_message

    async def branch_from_highlight(
        self,
        message_id: str,
        start: int,
        end: int,
        ask: bool = True,
    ) -> Highlight:
        """Start a branch from a highlighted span of a message.

        Appends a new anchor seeded with the highlighted text, records the
        highlight, and targets the new anchor for the next message.

        Args:
            message_id: Message the text was highlighted in
            start: Start character index (inclusive)
            end: End character index (exclusive)
            ask: Also ask the LLM about the highlight, answering in the branch

        Returns:
            The recorded Highlight, with branch_id set to the new anchor

        Raises:
            UnknownMessageError: If message_id is not in the thread
            ValueError: If the range is outside the message or selects only whitespace
        """
        source = self._thread.get(message_id)
        if not 0 <= start < end <= len(source.content):
            raise ValueError(
                f"Highlight range [{start}, {end}) is outside message of length {len(source.content)}"
            )
        text = source.content[start:end]
        if not text.strip():
            raise ValueError("Highlighted text must not be blank")

        anchor = await self._append(
            Message.create(MessageRole.USER, BRANCH_PROMPT_TEMPLATE.format(text=text.strip()))
        )
        highlight = Highlight(
            message_id=message_id,
            text=text,
            start_index=start,
            end_index=end,
            branch_id=anchor.id,
        )
        self._notes.highlights.append(highlight)
        self._replying_to = anchor.id
        logger.info("Branched %s from highlight in %s", anchor.id, message_id)

        if ask:
            await self._respond(anchor.id)
        await self.save_notes()
        return highlight

    def context_messages(self) -> list[ChatMessage]:
        """System prompt followed by every message, flattened in append order."""
        context = []
        if self._system_prompt:
            context.append(ChatMessage(role=MessageRole.SYSTEM.value, content=self._system_prompt))
        context.extend(ChatMessage.from_message(m) for m in self._thread)
        return context

    async def _respond(self, parent_id: str | None) -> Message:
        try:
            response = await self._llm.chat_completion(self.context_messages())
            content = response.content
        except Exception:
            logger.exception("LLM request failed; appending fallback response")
            content = FALLBACK_RESPONSE

        return await self._append(Message.create(MessageRole.ASSISTANT, content, parent_id))

    async def _append(self, message: Message) -> Message:
        """Store a message, persisting it before it enters the live thread."""
        if message.id in self._thread:
            raise DuplicateIdError(message.id)
        if self._memory is not None:
            await self._memory.append_message(self._conversation.id, message)
        return self._thread.append(message)

    # Annotations

    def pin(self, message_id: str) -> None:
        """Pin a message as an insight. Pinning twice is a no-op."""
        self._thread.get(message_id)
        if message_id not in self._notes.pinned:
            self._notes.pinned.append(message_id)

    def unpin(self, message_id: str) -> None:
        self._thread.get(message_id)
        if message_id in self._notes.pinned:
            self._notes.pinned.remove(message_id)

    def pinned_messages(self) -> list[Message]:
        """Pinned messages in pin order."""
        return [self._thread.get(mid) for mid in self._notes.pinned if mid in self._thread]

    def tag_confidence(self, message_id: str, level: ConfidenceLevel | str) -> ConfidenceLevel:
        """Record how confident the learner feels about a message."""
        self._thread.get(message_id)
        level = ConfidenceLevel(level)
        self._notes.confidence[message_id] = level
        return level

    def clear_confidence(self, message_id: str) -> None:
        self._thread.get(message_id)
        self._notes.confidence.pop(message_id, None)

    async def save_notes(self) -> None:
        """Persist annotations, when memory is attached."""
        if self._memory is not None:
            await self._memory.save_notes(self._conversation.id, self._notes)
