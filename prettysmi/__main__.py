from prettysmi.render import main

main()
