"""Identity graph sync.

Pulls user identities from AWS IAM, Google Workspace and Azure Entra ID,
one provider after another, and merges them into Neo4j as ``User`` nodes
tagged with the source that produced them.
"""
