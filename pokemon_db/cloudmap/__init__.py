# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
AWS CloudMap private namespace and service discovery for the load balancer
"""
