# 📄 File: accounts/modules/user_management/__init__.py
# 🧭 Purpose (Layman Explanation):
# Organizes the part of the account store that keeps user accounts and checks their passwords
# 🧪 Purpose (Technical Summary):
# Package initialization for the user management module (domain models, repository contract, SQLAlchemy implementation)
# 🔗 Dependencies:
# SQLAlchemy, pydantic, argon2-cffi, accounts.shared
# 🔄 Connected Modules / Calls From:
# Application backends and their HTTP handlers

"""
User Management Module

Architecture follows Domain-Driven Design:
- Domain: User entity, update requests and the repository contract
- Infrastructure: table mapping and the SQLAlchemy repository
"""
