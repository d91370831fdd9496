from delivery.output import deliver_cli, format_tweet, render_tweets

__all__ = [
    "deliver_cli",
    "format_tweet",
    "render_tweets",
]
