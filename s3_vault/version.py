"""S3 Vault Meta information.
   S3 Vault stores named secrets in an S3 bucket, protected by
   KMS-wrapped envelope encryption.
"""
__title__ = 's3_vault'
__description__ = (
   'S3 Vault stores named secrets in an S3 bucket '
   'with KMS envelope encryption.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/s3-vault'
