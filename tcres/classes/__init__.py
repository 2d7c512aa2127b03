# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from .decls import (
	ClassDecl,
	Constraint,
	ConstructorDecl,
	DataDecl,
	DataValue,
	DefaultBody,
	FieldDecl,
	InstanceDecl,
	MethodSig,
)
from .errors import (
	AmbiguousInstance,
	ArityMismatch,
	ClassResolutionError,
	DuplicateClass,
	DuplicateType,
	UnknownType,
	ErrorKind,
	MissingFieldInstance,
	MissingMethod,
	NoInstance,
	NotDerivable,
	OverlappingInstance,
	UnboundTypeVariable,
	UnknownClass,
	UnknownMethod,
	UnresolvableDefaults,
)
from .coherence import CoherenceChecker, matching_key
from .defaults import DefaultDependencyGraph, complete_method_table
from .dictionary import Dictionary, ImplOrigin, MethodEntry
from .registry import AcceptedInstance, Registry
from .merge import DeclUnit, MergeResult, RegistryBuilder, merge_units
from .resolver import DischargeResult, Resolver

__all__ = [
	"ClassDecl",
	"Constraint",
	"ConstructorDecl",
	"DataDecl",
	"DataValue",
	"DefaultBody",
	"FieldDecl",
	"InstanceDecl",
	"MethodSig",
	"AmbiguousInstance",
	"ArityMismatch",
	"ClassResolutionError",
	"DuplicateClass",
	"DuplicateType",
	"UnknownType",
	"ErrorKind",
	"MissingFieldInstance",
	"MissingMethod",
	"NoInstance",
	"NotDerivable",
	"OverlappingInstance",
	"UnboundTypeVariable",
	"UnknownClass",
	"UnknownMethod",
	"UnresolvableDefaults",
	"CoherenceChecker",
	"matching_key",
	"DefaultDependencyGraph",
	"complete_method_table",
	"Dictionary",
	"ImplOrigin",
	"MethodEntry",
	"AcceptedInstance",
	"Registry",
	"DeclUnit",
	"MergeResult",
	"RegistryBuilder",
	"merge_units",
	"DischargeResult",
	"Resolver",
]
