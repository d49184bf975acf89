"""Services for the Member Import application."""

from memberimport.services.member_client import MemberClient

__all__ = ["MemberClient"]
