"""Cypher statements used by the graph store adapter.

Labels and relationship types are interpolated only from the NodeLabel and
EdgeType enums; every value goes through query parameters.
"""

from rankflow.graph.models import EdgeType, NodeLabel


def upsert_node_query(label: NodeLabel) -> str:
    """MERGE a node by its key and overwrite its properties."""
    return (
        f"MERGE (n:{label.value} {{{label.key}: $key}}) "
        "SET n += $props, n.updated_at = datetime()"
    )


def delete_node_query(label: NodeLabel) -> str:
    """Delete a node together with every incident relationship."""
    return f"MATCH (n:{label.value} {{{label.key}: $key}}) DETACH DELETE n"


def upsert_edge_query(edge_type: EdgeType) -> str:
    """MERGE a relationship between two nodes.

    Tag and Category targets are created on demand; other endpoints must
    already exist, otherwise nothing is written.
    """
    source, target = edge_type.endpoints
    target_verb = "MERGE" if edge_type.creates_target else "MATCH"
    return (
        f"MATCH (a:{source.value} {{{source.key}: $from_key}}) "
        f"{target_verb} (b:{target.value} {{{target.key}: $to_key}}) "
        f"MERGE (a)-[:{edge_type.value}]->(b)"
    )


def delete_edge_query(edge_type: EdgeType) -> str:
    """Delete one relationship, leaving both nodes in place."""
    source, target = edge_type.endpoints
    return (
        f"MATCH (a:{source.value} {{{source.key}: $from_key}})"
        f"-[r:{edge_type.value}]->"
        f"(b:{target.value} {{{target.key}: $to_key}}) "
        "DELETE r"
    )


# Drops every HAS_TAG/IN_CATEGORY edge of the article before recreating the
# current set, so removed tags never linger. Runs as one statement.
REPLACE_ARTICLE_TERMS = """
MATCH (a:Article {id: $article_id})
OPTIONAL MATCH (a)-[r:HAS_TAG|IN_CATEGORY]->()
DELETE r
WITH DISTINCT a
FOREACH (tag_name IN $tags |
    MERGE (t:Tag {name: tag_name})
    MERGE (a)-[:HAS_TAG]->(t))
FOREACH (category_name IN $categories |
    MERGE (c:Category {name: category_name})
    MERGE (a)-[:IN_CATEGORY]->(c))
"""

USERS_WITH_COMMON_FOLLOWS = """
MATCH (u:User {id: $user_id})-[:FOLLOWS]->(common:User)<-[:FOLLOWS]-(similar:User)
WHERE similar.id <> $user_id
  AND NOT (u)-[:FOLLOWS]->(similar)
WITH similar, COUNT(DISTINCT common) AS common_followers
RETURN similar.id AS id, similar.name AS name, similar.username AS username,
       common_followers
ORDER BY common_followers DESC, id ASC
LIMIT $limit
"""

RELATED_ARTICLES = """
MATCH (a:Article {id: $article_id})-[:HAS_TAG|IN_CATEGORY]->(shared)
      <-[:HAS_TAG|IN_CATEGORY]-(related:Article)
WHERE related.id <> $article_id
  AND related.status = $published
WITH related, COUNT(DISTINCT shared) AS common_tags
RETURN related.id AS id, related.title AS title, related.slug AS slug,
       related.author_id AS author_id, common_tags
ORDER BY common_tags DESC, related.view_count DESC, id ASC
LIMIT $limit
"""

RECOMMENDED_ARTICLES_FOR_USER = """
MATCH (u:User {id: $user_id})-[:LIKES]->(liked:Article)-[:HAS_TAG|IN_CATEGORY]->(shared)
      <-[:HAS_TAG|IN_CATEGORY]-(rec:Article)
WHERE NOT (u)-[:LIKES]->(rec)
  AND rec.status = $published
WITH rec, COUNT(DISTINCT shared) AS relevance_score
RETURN rec.id AS id, rec.title AS title, rec.slug AS slug,
       rec.author_id AS author_id, relevance_score
ORDER BY relevance_score DESC, rec.view_count DESC, id ASC
LIMIT $limit
"""

INFLUENTIAL_AUTHORS = """
MATCH (author:User)<-[:FOLLOWS]-(follower:User)
WITH author, COUNT(DISTINCT follower) AS followers
WHERE followers >= $min_followers
OPTIONAL MATCH (author)-[:AUTHORED]->(article:Article)
WITH author, followers, COUNT(DISTINCT article) AS articles
RETURN author.id AS id, author.name AS name, author.username AS username,
       followers, articles
ORDER BY followers DESC, articles DESC, id ASC
LIMIT $limit
"""

TAGS_OF_INTEREST = """
MATCH (u:User {id: $user_id})-[:LIKES]->(a:Article)-[:HAS_TAG]->(tag:Tag)
WITH tag, COUNT(DISTINCT a) AS interactions
RETURN tag.name AS name, interactions, 'tag' AS type
ORDER BY interactions DESC, name ASC
LIMIT $limit
"""

CATEGORIES_OF_INTEREST = """
MATCH (u:User {id: $user_id})-[:LIKES]->(a:Article)-[:IN_CATEGORY]->(cat:Category)
WITH cat, COUNT(DISTINCT a) AS interactions
RETURN cat.name AS name, interactions, 'category' AS type
ORDER BY interactions DESC, name ASC
LIMIT $limit
"""

GRAPH_STATISTICS = """
CALL { MATCH (u:User) RETURN COUNT(u) AS users }
CALL { MATCH (a:Article) RETURN COUNT(a) AS articles }
CALL { MATCH ()-[f:FOLLOWS]->() RETURN COUNT(f) AS follows }
CALL { MATCH ()-[l:LIKES]->() RETURN COUNT(l) AS likes }
CALL { MATCH (t:Tag) RETURN COUNT(t) AS tags }
CALL { MATCH (c:Category) RETURN COUNT(c) AS categories }
RETURN users, articles, follows, likes, tags, categories
"""

CLEAR_ALL = "MATCH (n) DETACH DELETE n"
