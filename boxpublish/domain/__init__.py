"""
Domain types for the box publisher: identities, the metadata.json index
document, artifact descriptors and the error taxonomy.
"""
