"""rollout_agent.py - Chat loop that saves the session rollout after every turn.

Each assistant reply triggers a background rollout write, so the JSON file
under the sessions root always holds the latest snapshot of the history.
"""
