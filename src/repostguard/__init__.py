"""
RepostGuard - Discord moderation bot against reposted videos

RepostGuard watches a channel for YouTube links and remembers which videos
each user has posted. Posting the same video again is a repeat offense, and
repeat offenses escalate:

- **1st repeat**: message deleted, user timed out (3 hours by default)
- **2nd repeat**: message deleted, user kicked
- **3rd repeat**: message deleted, user banned, then the user's record is
  wiped so the video may be shared again later

Core Components:

- **Link Extractor** (`moderation.link_extractor`): video id from message text
- **Violation Store** / **Seen-Link Store** (`services`): aiosqlite persistence
- **Escalation Policy** (`moderation.escalation_policy`): count to action
- **Moderation Engine** (`moderation.moderation_engine`): per-message state machine

Usage:
    from repostguard.main import main
    main()
"""
