"""Representation of the platform resources involved in cluster registration.

Resources are parsed from kubernetes style documents (e.g. from a directory of
yaml files) into typed objects that are held in the store and consumed by the
controllers.
"""

import base64
import binascii
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from .exceptions import InputException

__all__ = [
    "parse_raw_obj",
    "NamedResource",
    "Cluster",
    "StateStore",
    "StateStoreType",
    "BucketStateStore",
    "GitStateStore",
    "Secret",
]

# Match a prefix of apiVersion to ensure we have the right type of object.
# We don't check specific versions for forward compatibility on upgrade.
PLATFORM_DOMAIN = "platform.kratix.io"
CLUSTER_KIND = "Cluster"
BUCKET_STATE_STORE_KIND = "BucketStateStore"
GIT_STATE_STORE_KIND = "GitStateStore"
SECRET_KIND = "Secret"
DEFAULT_NAMESPACE = "default"
DEFAULT_GIT_BRANCH = "main"


def _check_version(doc: dict[str, Any], version: str) -> None:
    """Assert that the resource has the specified version."""
    if not (api_version := doc.get("apiVersion")):
        raise InputException(f"Invalid object missing apiVersion: {doc}")
    if not api_version.startswith(version):
        raise InputException(f"Invalid object expected '{version}': {doc}")


def _parse_metadata(cls: type, doc: dict[str, Any]) -> tuple[str, str]:
    """Return the name and namespace of a namespaced resource document."""
    if not (metadata := doc.get("metadata")):
        raise InputException(f"Invalid {cls.__name__} missing metadata: {doc}")
    if not (name := metadata.get("name")):
        raise InputException(f"Invalid {cls.__name__} missing metadata.name: {doc}")
    return name, metadata.get("namespace") or DEFAULT_NAMESPACE


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all manifest objects."""

    class Config(BaseConfig):
        omit_none = True


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass
class ObjectReference(BaseManifest):
    """A reference to another object, optionally in another namespace."""

    name: str
    """The name of the referenced object."""

    namespace: str | None = None
    """The namespace of the referenced object, defaults to the referrer's."""

    kind: str | None = None
    """The kind of the referenced object, when the reference is polymorphic."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any], field_name: str) -> "ObjectReference":
        """Parse a reference from a spec field."""
        if not isinstance(doc, dict) or not (name := doc.get("name")):
            raise InputException(f"Invalid {field_name} missing name: {doc}")
        return cls(name=name, namespace=doc.get("namespace"), kind=doc.get("kind"))

    def resource_id(self, kind: str, default_namespace: str) -> NamedResource:
        """Return the concrete identity of the referenced object.

        An unset namespace resolves to the namespace of the referencing object.
        """
        return NamedResource(
            kind=self.kind or kind,
            namespace=self.namespace or default_namespace,
            name=self.name,
        )


@dataclass
class Cluster(BaseManifest):
    """A worker cluster registered with the platform."""

    kind: ClassVar[str] = CLUSTER_KIND
    """The kind of the object."""

    name: str
    """The name of the Cluster."""

    namespace: str
    """The namespace of the Cluster."""

    state_store_ref: ObjectReference = field(
        metadata=field_options(alias="stateStoreRef")
    )
    """Reference to the StateStore holding this cluster's declarative state."""

    path: str = ""
    """Path prefix under which this cluster's manifests are organized."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Cluster":
        """Parse a Cluster from a kubernetes resource."""
        _check_version(doc, PLATFORM_DOMAIN)
        name, namespace = _parse_metadata(cls, doc)
        if not (spec := doc.get("spec")):
            raise InputException(f"Invalid {cls.__name__} missing spec: {doc}")
        if not (state_store_ref := spec.get("stateStoreRef")):
            raise InputException(
                f"Invalid {cls.__name__} missing spec.stateStoreRef: {doc}"
            )
        return cls(
            name=name,
            namespace=namespace,
            state_store_ref=ObjectReference.parse_doc(
                state_store_ref, "spec.stateStoreRef"
            ),
            path=spec.get("path") or "",
        )

    @property
    def resource_id(self) -> NamedResource:
        """Identity of the Cluster in the store."""
        return NamedResource(self.kind, self.namespace, self.name)

    @property
    def state_store_id(self) -> NamedResource:
        """Identity of the StateStore this Cluster references."""
        return self.state_store_ref.resource_id(
            BUCKET_STATE_STORE_KIND, self.namespace
        )


class StateStoreType(StrEnum):
    """The kind of backend persisting a StateStore's documents."""

    BUCKET = "bucket"
    GIT = "git"


@dataclass
class StateStore(BaseManifest):
    """Base class describing where cluster manifests are persisted.

    Only a reference to the credentials is held here, the secret material is
    never copied onto the StateStore.
    """

    kind: ClassVar[str]
    """The kind of the object."""

    backend: ClassVar[StateStoreType]
    """Discriminant selecting the writer backend."""

    name: str
    """The name of the StateStore."""

    namespace: str
    """The namespace of the StateStore."""

    secret_ref: ObjectReference = field(metadata=field_options(alias="secretRef"))
    """Reference to the Secret holding credentials for the backend."""

    @property
    def resource_id(self) -> NamedResource:
        """Identity of the StateStore in the store."""
        return NamedResource(self.kind, self.namespace, self.name)

    @property
    def secret_id(self) -> NamedResource:
        """Identity of the Secret this StateStore references."""
        return NamedResource(
            SECRET_KIND,
            self.secret_ref.namespace or self.namespace,
            self.secret_ref.name,
        )

    @classmethod
    def _parse_common(
        cls, doc: dict[str, Any]
    ) -> tuple[str, str, dict[str, Any], ObjectReference]:
        """Parse the fields shared by all StateStore kinds."""
        _check_version(doc, PLATFORM_DOMAIN)
        name, namespace = _parse_metadata(cls, doc)
        if not (spec := doc.get("spec")):
            raise InputException(f"Invalid {cls.__name__} missing spec: {doc}")
        if not (secret_ref := spec.get("secretRef")):
            raise InputException(
                f"Invalid {cls.__name__} missing spec.secretRef: {doc}"
            )
        return (
            name,
            namespace,
            spec,
            ObjectReference.parse_doc(secret_ref, "spec.secretRef"),
        )


@dataclass
class BucketStateStore(StateStore):
    """A StateStore backed by an S3 compatible object storage bucket."""

    kind: ClassVar[str] = BUCKET_STATE_STORE_KIND
    backend: ClassVar[StateStoreType] = StateStoreType.BUCKET

    endpoint: str
    """Host (and optional port) of the object storage service."""

    bucket_name: str = field(metadata=field_options(alias="bucketName"))
    """Name of the bucket documents are written to."""

    insecure: bool = False
    """Connect over plain http instead of https."""

    region: str | None = None
    """Optional region of the bucket."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "BucketStateStore":
        """Parse a BucketStateStore from a kubernetes resource."""
        name, namespace, spec, secret_ref = cls._parse_common(doc)
        if not (endpoint := spec.get("endpoint")):
            raise InputException(
                f"Invalid {cls.__name__} missing spec.endpoint: {doc}"
            )
        if not (bucket_name := spec.get("bucketName")):
            raise InputException(
                f"Invalid {cls.__name__} missing spec.bucketName: {doc}"
            )
        return cls(
            name=name,
            namespace=namespace,
            secret_ref=secret_ref,
            endpoint=endpoint,
            bucket_name=bucket_name,
            insecure=bool(spec.get("insecure", False)),
            region=spec.get("region"),
        )

    @property
    def endpoint_url(self) -> str:
        """The endpoint as a URL with the scheme implied by `insecure`."""
        if "://" in self.endpoint:
            return self.endpoint
        scheme = "http" if self.insecure else "https"
        return f"{scheme}://{self.endpoint}"


@dataclass
class GitStateStore(StateStore):
    """A StateStore backed by a branch of a git repository."""

    kind: ClassVar[str] = GIT_STATE_STORE_KIND
    backend: ClassVar[StateStoreType] = StateStoreType.GIT

    url: str
    """The URL of the git repository."""

    branch: str = DEFAULT_GIT_BRANCH
    """The branch documents are committed to."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "GitStateStore":
        """Parse a GitStateStore from a kubernetes resource."""
        name, namespace, spec, secret_ref = cls._parse_common(doc)
        if not (url := spec.get("url")):
            raise InputException(f"Invalid {cls.__name__} missing spec.url: {doc}")
        return cls(
            name=name,
            namespace=namespace,
            secret_ref=secret_ref,
            url=url,
            branch=spec.get("branch") or DEFAULT_GIT_BRANCH,
        )


@dataclass
class Secret(BaseManifest):
    """A Secret contains a small amount of sensitive data."""

    kind: ClassVar[str] = SECRET_KIND
    """The kind of the Secret."""

    name: str
    """The name of the Secret."""

    namespace: str
    """The namespace of the Secret."""

    data: dict[str, bytes] = field(
        default_factory=dict, repr=False, metadata={"serialize": "omit"}
    )
    """The decoded secret material."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Secret":
        """Parse a secret object from a kubernetes resource.

        Values in `data` are base64 decoded, values in `stringData` are taken
        as-is and take precedence, as they do when applied to a cluster.
        """
        _check_version(doc, "v1")
        name, namespace = _parse_metadata(cls, doc)
        data: dict[str, bytes] = {}
        for key, value in (doc.get("data") or {}).items():
            try:
                data[key] = base64.b64decode(str(value), validate=True)
            except binascii.Error as err:
                raise InputException(
                    f"Invalid {cls.__name__} {namespace}/{name} data.{key} is not base64"
                ) from err
        for key, value in (doc.get("stringData") or {}).items():
            data[key] = str(value).encode()
        return cls(name=name, namespace=namespace, data=data)

    @property
    def resource_id(self) -> NamedResource:
        """Identity of the Secret in the store."""
        return NamedResource(self.kind, self.namespace, self.name)


STATE_STORE_KINDS: dict[str, type[StateStore]] = {
    BUCKET_STATE_STORE_KIND: BucketStateStore,
    GIT_STATE_STORE_KIND: GitStateStore,
}


def parse_raw_obj(obj: dict[str, Any]) -> BaseManifest:
    """Parse a raw kubernetes object into a BaseManifest."""
    if not (kind := obj.get("kind")):
        raise InputException(f"Invalid object missing kind: {obj}")
    if not obj.get("apiVersion"):
        raise InputException(f"Invalid object missing apiVersion: {obj}")
    if kind == CLUSTER_KIND:
        return Cluster.parse_doc(obj)
    if state_store_cls := STATE_STORE_KINDS.get(kind):
        return state_store_cls.parse_doc(obj)
    if kind == SECRET_KIND:
        return Secret.parse_doc(obj)
    raise InputException(f"Unsupported object kind {kind}")
