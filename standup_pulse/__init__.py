"""Daily standup prompts and thread aggregation for Slack."""
