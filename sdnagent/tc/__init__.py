"""Linux traffic control qdisc parsing, formatting, trees and invocation of tc."""