"""Session Gateway Layer.

Fronts a chat-completion provider by composing two upstream calls:
  - Upstream Client (session + completion HTTP calls, error normalization)
  - Session Acquirer (bounded retry with a fixed delay)
  - Completion Composer (builds the completion request, single attempt)
  - Chat Gateway (session → completion orchestration)
"""
