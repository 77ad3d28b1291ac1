"""Review run orchestration."""

from pr_reviewer.agents.review_agent import ReviewAgent, ReviewAgentState

__all__ = ["ReviewAgent", "ReviewAgentState"]
