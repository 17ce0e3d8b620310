"""Core Business Logic Module

This module provides the resource-lifecycle engine behind the SCIM user
endpoint, independent of the HTTP framework.

Module Structure:
    - store/                  : Document store contract, MongoDB and in-memory backends
    - resource.py             : Resource, Meta, Page, PatchOperation, ResourceType
    - scim_transformer.py     : Stored document ↔ resource ↔ SCIM body
    - patch.py                : PATCH add/replace/remove engine
    - pagination.py           : 1-based offset pagination
    - provisioning_client.py  : Downstream replication over HTTP
    - provisioning_service.py : UserResourceHandler (create/get/get_all/replace/delete/patch)
    - exceptions.py           : ScimError taxonomy
    - seed.py                 : Demo users

Usage Pattern:
    Import explicitly when needed:
        from app.core.provisioning_service import UserResourceHandler, HandlerConfig
        from app.core.store import MongoDocumentStore
        from app.core.exceptions import ScimError
"""
