# tests/test_counts.py
from cow_blog.db.persistence import insert
from cow_blog.db.query import Query, fetch_all
from cow_blog.db.schema import EntityType
from cow_blog.models import Comment
from cow_blog.models.post import POST_TYPE_PAGE, STATUS_DRAFT
from cow_blog.services.counts import CountUpdates, update_counts
from cow_blog.services.tags import add_tags_to_post


def _live_comment_counts(db_session) -> dict[int, int]:
    comments = fetch_all(db_session, Query(EntityType.COMMENT).admin(False))
    counts: dict[int, int] = {}
    for comment in comments:
        counts[comment.post_id] = counts.get(comment.post_id, 0) + 1
    return counts


def test_update_counts_matches_live_rows(db_session, post, draft_post, category, make_post) -> None:
    page = make_post("About", post_type=POST_TYPE_PAGE, category_id=category.id)
    insert(db_session, Comment(post_id=post.id, markdown="first"))
    insert(db_session, Comment(post_id=post.id, markdown="second"))
    insert(db_session, Comment(post_id=post.id, markdown="spam", status=STATUS_DRAFT))
    insert(db_session, Comment(post_id=page.id, markdown="nice page"))
    (lisp,) = add_tags_to_post(db_session, post, ["Lisp"])
    add_tags_to_post(db_session, draft_post, ["Lisp"])
    add_tags_to_post(db_session, page, ["Lisp"])

    updates = update_counts(db_session)

    assert updates == CountUpdates(posts=2, categories=1, tags=1)
    live = _live_comment_counts(db_session)
    for p in fetch_all(db_session, Query(EntityType.POST)):
        assert p.num_comments == live.get(p.id, 0)
    # Pages are not counted; drafts are.
    assert category.num_posts == 2
    assert lisp.num_posts == 2


def test_update_counts_is_idempotent(db_session, post) -> None:
    insert(db_session, Comment(post_id=post.id, markdown="hello"))

    first = update_counts(db_session)
    second = update_counts(db_session)

    assert (first.posts, first.categories, first.tags) == (1, 1, 0)
    assert second.total == 0
    assert post.num_comments == 1


def test_update_counts_lowers_stale_counts(db_session, post, category) -> None:
    post.num_comments = 7
    category.num_posts = 9
    db_session.flush()

    updates = update_counts(db_session)

    assert updates.posts == 1
    assert updates.categories == 1
    assert post.num_comments == 0
    assert category.num_posts == 1
