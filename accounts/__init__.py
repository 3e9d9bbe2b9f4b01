# 📄 File: accounts/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Marks the 'accounts' folder as the package that stores user accounts and checks passwords.
#
# 🧪 Purpose (Technical Summary):
# Package initialization with version info for the account store.
#
# 🔗 Dependencies:
# - Python packaging system
#
# 🔄 Connected Modules / Calls From:
# - Application backends embedding the account store

"""
Account Store

Transactional CRUD for user accounts and keyed password verification.
"""

__version__ = "0.1.0"
__title__ = "accounts"
__description__ = "User account repository with keyed password hashing"
