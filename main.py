from typing import Optional

from fastapi import FastAPI, HTTPException, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

import config
import seed
from database import Registry, TargetKind
from errors import NotFound, ValidationError
from formatting import comment_view, post_view
from logging_utils import setup_logging
from ranking import SortPolicy
from schemas import Author, CommentCreate, PostCreate, VoteRequest


def create_app(registry: Optional[Registry] = None) -> FastAPI:
    if registry is None:
        registry = Registry(
            nested_reply_levels=config.NESTED_REPLY_LEVELS,
            max_depth=config.MAX_COMMENT_DEPTH,
        )
        if config.SEED_ON_STARTUP:
            registry.seed()

    app = FastAPI(title=config.APP_TITLE)
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Helpers

    def get_registry(request: Request) -> Registry:
        return request.app.state.registry

    def acting_user(user_id: Optional[str]) -> Author:
        wanted = user_id or config.DEFAULT_AUTHOR_ID
        for author in seed.AUTHORS:
            if author.id == wanted:
                return author
        raise HTTPException(status_code=400, detail="Unknown user")

    def require_post(registry: Registry, post_id: str):
        post = registry.get_post(post_id)
        if post is None:
            raise HTTPException(status_code=404, detail="Post not found")
        return post

    # API Endpoints

    @app.get("/")
    def read_root():
        return {"message": f"{config.APP_TITLE} running"}

    @app.get("/api/communities")
    def list_communities(request: Request):
        return [c.model_dump(mode="json") for c in get_registry(request).list_communities()]

    @app.get("/api/posts")
    def list_posts(
        request: Request,
        community: Optional[str] = Query(None),
        q: Optional[str] = Query(None, description="Search title and content"),
        sort: SortPolicy = Query(SortPolicy.hot),
    ):
        registry = get_registry(request)
        now = registry.clock()
        return [post_view(p, now) for p in registry.list_posts(community, q, sort)]

    @app.get("/api/posts/{post_id}")
    def get_post(post_id: str, request: Request):
        registry = get_registry(request)
        return post_view(require_post(registry, post_id), registry.clock())

    @app.post("/api/posts")
    def create_post(payload: PostCreate, request: Request, x_user_id: Optional[str] = Header(None)):
        registry = get_registry(request)
        try:
            post = registry.create_post(acting_user(x_user_id), payload)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return post_view(post, registry.clock())

    @app.post("/api/posts/{post_id}/vote")
    def vote_post(post_id: str, payload: VoteRequest, request: Request):
        registry = get_registry(request)
        try:
            post = registry.vote(TargetKind.post, post_id, payload.direction, strict=True)
        except NotFound:
            raise HTTPException(status_code=404, detail="Post not found")
        return post_view(post, registry.clock())

    @app.post("/api/posts/{post_id}/save")
    def toggle_save(post_id: str, request: Request):
        registry = get_registry(request)
        try:
            post = registry.toggle_save(post_id, strict=True)
        except NotFound:
            raise HTTPException(status_code=404, detail="Post not found")
        return post_view(post, registry.clock())

    @app.get("/api/posts/{post_id}/comments")
    def list_comments(post_id: str, request: Request):
        registry = get_registry(request)
        require_post(registry, post_id)
        now = registry.clock()
        return [comment_view(c, now) for c in registry.list_comments(post_id)]

    @app.post("/api/posts/{post_id}/comments")
    def add_comment(post_id: str, payload: CommentCreate, request: Request, x_user_id: Optional[str] = Header(None)):
        registry = get_registry(request)
        try:
            comment = registry.add_comment(
                acting_user(x_user_id), post_id, payload.content, payload.parent_id, strict=True
            )
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except NotFound as e:
            raise HTTPException(status_code=404, detail=str(e))
        return comment_view(comment, registry.clock())

    @app.post("/api/comments/{comment_id}/vote")
    def vote_comment(comment_id: str, payload: VoteRequest, request: Request):
        registry = get_registry(request)
        try:
            comment = registry.vote(TargetKind.comment, comment_id, payload.direction, strict=True)
        except NotFound:
            raise HTTPException(status_code=404, detail="Comment not found")
        return comment_view(comment, registry.clock())

    @app.post("/seed")
    def reseed(request: Request):
        """
        Reset content to the sample communities, posts and threaded comments.
        """
        registry = get_registry(request)
        registry.seed()
        posts, comments = registry.counts()
        logger.info("Registry reseeded")
        return {"status": "ok", "posts": posts, "comments": comments}

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
