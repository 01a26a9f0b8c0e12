"""agent-workspace: multi-agent plan/execute orchestration behind a chat workspace."""
