from abc import ABC, abstractmethod


class AbstractChatClient(ABC):
	"""Interface for chat-completion clients used by the relay."""

	@abstractmethod
	async def generate_reply(self, *, system_prompt: str, user_text: str) -> str | None:
		"""Ask the model for a reply to a system directive and user text.

		Args:
			system_prompt: Content of the system-role message.
			user_text: Content of the user-role message.

		Returns:
			str | None: Content of the first choice's message, untrimmed, or
			None when the upstream payload carries no reply.

		Raises:
			UpstreamAppError: If the provider answers with a non-success status
				or does not answer in time.
		"""
		...
