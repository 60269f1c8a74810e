#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from pokemon_db.common.cfn_params import Parameter

LB_T = "ServiceLoadBalancer"
LB_SG_T = "ServiceLoadBalancerSecurityGroup"
LB_TO_SERVICE_INGRESS_T = "FromLoadBalancerToService"
LISTENER_T = "ServiceLoadBalancerListener"
TGT_GROUP_T = "ServiceTargetGroup"

LB_PORT = 80
LB_PROTOCOL = "HTTP"
LB_TYPE = "application"
PUBLIC_SCHEME = "internet-facing"
PRIVATE_SCHEME = "internal"

LB_DNS_NAME_T = "DNSName"
LB_DNS_NAME = Parameter(LB_DNS_NAME_T, return_value="DNSName", Type="String")
SERVICE_URL_T = "ServiceURL"
