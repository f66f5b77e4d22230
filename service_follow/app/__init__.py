"""
Follow Service package.

This package manages the social follow graph: who follows whom, and the
following/followers lists of each user. It provides:

- app.main: FastAPI surface for follow, unfollow and list operations.
- app.auth: Bearer credential resolution into a caller identity.
- app.persistence: PostgreSQL storage for follow edges.
- app.cache: Redis-backed cache-aside layer for the list reads.
- app.follows: Domain models and the FollowService orchestration.

Guidelines:
- The service is stateless; rely on external cache/DB.
- Writes never invalidate cached lists; entries expire by TTL.
- Module import must not perform network calls. All IO happens in route
  handlers or the lifespan startup hook.
"""
