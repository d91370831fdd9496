"""
Output rendering. One line per tweet, plus a CLI printer.
"""

import json

from models import CollectionOutcome, CollectionResult, Tweet

# Matches how the provider's Java clients print dates: "Wed Aug 27 13:08:45 UTC 2008"
TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %Z %Y"


def format_tweet(tweet: Tweet) -> str:
    return f"{tweet.created_at.strftime(TIMESTAMP_FORMAT)} : {tweet.screen_name} : {tweet.text}"


def render_tweets(tweets: list[Tweet]) -> str:
    """`<timestamp> : <handle> : <text>` per tweet, newline-terminated."""
    return "".join(format_tweet(t) + "\n" for t in tweets)


def deliver_cli(result: CollectionResult, as_json: bool = False):
    """Print to stdout."""
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    separator = "─" * 60
    notes = {
        CollectionOutcome.EXHAUSTED: "no more matching tweets available",
        CollectionOutcome.RATE_LIMITED: "stopped early: rate limited",
        CollectionOutcome.CANCELLED: "stopped early: cancelled",
    }

    print(f"\n{separator}")
    print(f"  {len(result.tweets)}/{result.requested} tweets ({result.pages} pages)")
    if result.outcome in notes:
        print(f"  ({notes[result.outcome]})")
    print(separator)
    print()
    print(render_tweets(result.tweets), end="")
    print()
    print(separator)
